"""Official result submission: the reconciled, round-based record per unit.

Every accepted submission is a new immutable round. A unit's authoritative
result is always its highest round; earlier rounds are kept as history and
never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Max

from core.models import MAX_COUNT, AuditLog, Candidate, PollingUnit, UnitSubmission, VoteResult
from core.tally_errors import (
    BalanceError,
    ConflictError,
    MissingReasonError,
    NotFoundError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteLine:
    candidate_id: int
    vote_count: int


@dataclass(frozen=True)
class SubmissionReceipt:
    submission: UnitSubmission
    vote_results: tuple[VoteResult, ...]

    @property
    def round(self) -> int:
        return int(self.submission.round)

    @property
    def is_recount(self) -> bool:
        return self.round > 1


@dataclass(frozen=True)
class SubmissionStatus:
    submissions: list[UnitSubmission]
    latest_votes: list[VoteResult]
    current_round: int


def _coerce_count(value: object, *, field: str, default: int | None = 0) -> int:
    if value is None or value == "":
        if default is None:
            raise ValidationError(f"{field} is required", fields=(field,))
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a whole number", fields=(field,))
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationError(f"{field} must be a whole number", fields=(field,)) from exc
    if isinstance(value, float) and value != number:
        raise ValidationError(f"{field} must be a whole number", fields=(field,))
    if number < 0:
        raise ValidationError(f"{field} must not be negative", fields=(field,))
    if number > MAX_COUNT:
        raise ValidationError(f"{field} must not exceed {MAX_COUNT}", fields=(field,))
    return number


def parse_vote_lines(votes: object) -> list[VoteLine]:
    if not isinstance(votes, list):
        raise ValidationError("votes must be a list", fields=("votes",))

    lines: list[VoteLine] = []
    seen: set[int] = set()
    for idx, raw in enumerate(votes):
        if not isinstance(raw, Mapping):
            raise ValidationError(f"votes[{idx}] must be an object", fields=("votes",))
        candidate_id = _coerce_count(raw.get("candidateId"), field=f"votes[{idx}].candidateId", default=None)
        vote_count = _coerce_count(raw.get("voteCount"), field=f"votes[{idx}].voteCount", default=None)
        if candidate_id in seen:
            raise ValidationError(f"candidate {candidate_id} appears more than once", fields=("votes",))
        seen.add(candidate_id)
        lines.append(VoteLine(candidate_id=candidate_id, vote_count=vote_count))
    return lines


def check_balance(*, vote_lines: Iterable[VoteLine], total_no_vote: int, total_void_ballots: int, total_signatures: int) -> None:
    total_candidate_votes = sum(line.vote_count for line in vote_lines)
    total_counted = total_candidate_votes + total_no_vote + total_void_ballots
    if total_counted != total_signatures:
        raise BalanceError(total_counted=total_counted, total_signatures=total_signatures)


def _next_round(*, polling_unit_id: int) -> int:
    current = UnitSubmission.objects.filter(polling_unit_id=polling_unit_id).aggregate(latest=Max("round"))["latest"]
    return int(current or 0) + 1


def _round_taken(*, polling_unit_id: int, round_number: int) -> bool:
    try:
        return UnitSubmission.objects.filter(polling_unit_id=polling_unit_id, round=round_number).exists()
    except DatabaseError as exc:
        raise StoreError("official submission could not be stored") from exc


def _audit_details(*, unit: PollingUnit, submission: UnitSubmission) -> str:
    if submission.round == 1:
        return (
            f"{unit.name} submitted official result (round 1): "
            f"signatures {submission.total_signatures}, "
            f"void {submission.total_void_ballots}, "
            f"no vote {submission.total_no_vote}"
        )
    return f"{unit.name} amended official result (round {submission.round})"


def submit_official_result(
    *,
    polling_unit_id: object,
    total_signatures: object,
    votes: object,
    submitted_by: str,
    ballots_issued: object = 0,
    ballots_remaining: object = 0,
    total_no_vote: object = 0,
    total_void_ballots: object = 0,
    photo_evidence: object = "",
    reason: object = "",
) -> SubmissionReceipt:
    """Validate and commit a new official round for a polling unit.

    Not idempotent: identical payloads submitted twice produce two rounds.
    Callers retrying after an ambiguous failure should check
    ``submission_status`` first.
    """
    if not polling_unit_id or total_signatures is None or votes is None:
        raise ValidationError(
            "pollingUnitId, totalSignatures and votes are required",
            fields=("pollingUnitId", "totalSignatures", "votes"),
        )

    unit_pk = _coerce_count(polling_unit_id, field="pollingUnitId", default=None)
    signatures = _coerce_count(total_signatures, field="totalSignatures", default=None)
    no_vote = _coerce_count(total_no_vote, field="totalNoVote")
    void_ballots = _coerce_count(total_void_ballots, field="totalVoidBallots")
    issued = _coerce_count(ballots_issued, field="ballotsIssued")
    remaining = _coerce_count(ballots_remaining, field="ballotsRemaining")
    vote_lines = parse_vote_lines(votes)
    reason_text = str(reason or "").strip()
    evidence = str(photo_evidence or "").strip()

    try:
        check_balance(
            vote_lines=vote_lines,
            total_no_vote=no_vote,
            total_void_ballots=void_ballots,
            total_signatures=signatures,
        )
    except BalanceError as exc:
        logger.warning(
            "Rejected unbalanced submission for unit %s: counted=%d signatures=%d by=%s",
            unit_pk,
            exc.total_counted,
            exc.total_signatures,
            submitted_by,
        )
        raise

    attempted_round = 0
    try:
        with transaction.atomic():
            # Serialize submissions per unit; the (unit, round) constraint is the backstop.
            unit = PollingUnit.objects.select_for_update().only("id", "name").filter(pk=unit_pk).first()
            attempted_round = _next_round(polling_unit_id=unit_pk)

            if attempted_round > 1 and not reason_text:
                raise MissingReasonError(round_number=attempted_round)
            if unit is None:
                raise NotFoundError(f"polling unit {unit_pk} does not exist")

            candidate_ids = {line.candidate_id for line in vote_lines}
            known_ids = set(Candidate.objects.filter(pk__in=candidate_ids).values_list("id", flat=True))
            unknown = sorted(candidate_ids - known_ids)
            if unknown:
                raise ValidationError(
                    f"unknown candidates: {', '.join(str(cid) for cid in unknown)}",
                    fields=("votes",),
                )

            submission = UnitSubmission.objects.create(
                polling_unit=unit,
                round=attempted_round,
                total_signatures=signatures,
                ballots_issued=issued,
                ballots_remaining=remaining,
                total_no_vote=no_vote,
                total_void_ballots=void_ballots,
                photo_evidence=evidence,
                submitted_by=submitted_by,
                reason=reason_text if attempted_round > 1 else "",
            )

            vote_results = tuple(
                VoteResult.objects.create(
                    polling_unit=unit,
                    candidate_id=line.candidate_id,
                    vote_count=line.vote_count,
                    round=attempted_round,
                    submitted_by=submitted_by,
                )
                for line in vote_lines
            )

            AuditLog.objects.create(
                action=AuditLog.Action.submit if attempted_round == 1 else AuditLog.Action.recount,
                polling_unit=unit.name,
                round=attempted_round,
                details=_audit_details(unit=unit, submission=submission),
                reason=reason_text if attempted_round > 1 else None,
                performed_by=submitted_by,
            )
    except IntegrityError as exc:
        if not _round_taken(polling_unit_id=unit_pk, round_number=attempted_round):
            logger.exception("Official submission for unit %s violated an integrity constraint", unit_pk)
            raise StoreError("official submission could not be stored") from exc
        logger.warning(
            "Round conflict for unit %s at round %d by %s",
            unit_pk,
            attempted_round,
            submitted_by,
            exc_info=True,
        )
        raise ConflictError(
            "another submission claimed this round; reload the current round and resubmit",
            polling_unit_id=unit_pk,
            attempted_round=attempted_round,
        ) from exc
    except DatabaseError as exc:
        logger.exception("Official submission failed for unit %s", unit_pk)
        raise StoreError("official submission could not be stored") from exc

    logger.info(
        "Accepted official result unit=%s round=%d signatures=%d by=%s",
        unit_pk,
        attempted_round,
        signatures,
        submitted_by,
    )
    return SubmissionReceipt(submission=submission, vote_results=vote_results)


def submission_status(*, polling_unit_id: int) -> SubmissionStatus:
    submissions = list(UnitSubmission.objects.filter(polling_unit_id=polling_unit_id).order_by("-round"))
    current_round = int(submissions[0].round) if submissions else 0

    latest_votes: list[VoteResult] = []
    if current_round:
        latest_votes = list(
            VoteResult.objects.filter(polling_unit_id=polling_unit_id, round=current_round)
            .select_related("candidate")
            .order_by("candidate__number", "id")
        )

    return SubmissionStatus(submissions=submissions, latest_votes=latest_votes, current_round=current_round)
