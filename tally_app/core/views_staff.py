"""Staff JSON endpoints: official submission, live tallies, unit set-up."""

import json
import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_http_methods

from core import live_tally, submissions, units
from core.models import LiveTally, UnitSubmission, VoteResult
from core.permissions import json_staff_required
from core.tally_errors import TallyError
from core.views_utils import get_username, parse_json_body, parse_optional_int, tally_error_response

logger = logging.getLogger(__name__)


def submission_payload(submission: UnitSubmission) -> dict[str, object]:
    return {
        "id": submission.id,
        "pollingUnitId": submission.polling_unit_id,
        "round": submission.round,
        "totalSignatures": submission.total_signatures,
        "ballotsIssued": submission.ballots_issued,
        "ballotsRemaining": submission.ballots_remaining,
        "totalNoVote": submission.total_no_vote,
        "totalVoidBallots": submission.total_void_ballots,
        "photoEvidence": submission.photo_evidence or None,
        "submittedBy": submission.submitted_by,
        "reason": submission.reason or None,
        "createdAt": submission.created_at.isoformat(),
    }


def vote_result_payload(result: VoteResult) -> dict[str, object]:
    # Callers pass rows loaded with select_related("candidate").
    candidate = result.candidate
    return {
        "id": result.id,
        "pollingUnitId": result.polling_unit_id,
        "candidateId": result.candidate_id,
        "round": result.round,
        "voteCount": result.vote_count,
        "candidate": {"id": candidate.id, "number": candidate.number, "name": candidate.name},
    }


def live_tally_payload(tally: LiveTally) -> dict[str, object]:
    return {
        "id": tally.id,
        "pollingUnitId": tally.polling_unit_id,
        "candidateId": tally.candidate_id,
        "tallyType": tally.tally_type,
        "count": tally.count,
        "updatedAt": tally.updated_at.isoformat() if tally.updated_at else None,
    }


def _submit(request: HttpRequest) -> JsonResponse:
    try:
        data = parse_json_body(request)
    except (ValueError, json.JSONDecodeError) as exc:
        return JsonResponse({"error": str(exc)}, status=400)

    try:
        receipt = submissions.submit_official_result(
            polling_unit_id=data.get("pollingUnitId"),
            total_signatures=data.get("totalSignatures"),
            votes=data.get("votes"),
            ballots_issued=data.get("ballotsIssued"),
            ballots_remaining=data.get("ballotsRemaining"),
            total_no_vote=data.get("totalNoVote"),
            total_void_ballots=data.get("totalVoidBallots"),
            photo_evidence=data.get("photoEvidence"),
            reason=data.get("reason"),
            submitted_by=get_username(request),
        )
    except TallyError as exc:
        return tally_error_response(exc)

    message = "Result submitted." if receipt.round == 1 else f"Round {receipt.round} amendment saved."
    return JsonResponse(
        {
            "success": True,
            "round": receipt.round,
            "submission": submission_payload(receipt.submission),
            "message": message,
        },
        status=201,
    )


def _status(request: HttpRequest) -> JsonResponse:
    try:
        unit_id = parse_optional_int(request.GET.get("unitId"), field="unitId")
    except TallyError as exc:
        return tally_error_response(exc)
    if unit_id is None:
        return JsonResponse({"error": "unitId is required."}, status=400)

    status = submissions.submission_status(polling_unit_id=unit_id)
    return JsonResponse(
        {
            "submissions": [submission_payload(s) for s in status.submissions],
            "latestVotes": [vote_result_payload(v) for v in status.latest_votes],
            "currentRound": status.current_round,
        }
    )


@require_http_methods(["GET", "POST"])
@json_staff_required
def staff_submit(request: HttpRequest) -> JsonResponse:
    if request.method == "POST":
        return _submit(request)
    return _status(request)


def _apply_live(request: HttpRequest) -> JsonResponse:
    try:
        data = parse_json_body(request)
    except (ValueError, json.JSONDecodeError) as exc:
        return JsonResponse({"error": str(exc)}, status=400)

    try:
        tally = live_tally.apply_live_delta(
            polling_unit_id=data.get("pollingUnitId"),
            candidate_id=data.get("candidateId"),
            tally_type=data.get("tallyType"),
            delta=data.get("delta"),
            performed_by=get_username(request),
        )
    except TallyError as exc:
        return tally_error_response(exc)

    return JsonResponse(live_tally_payload(tally))


def _list_live(request: HttpRequest) -> JsonResponse:
    try:
        unit_id = parse_optional_int(request.GET.get("unitId"), field="unitId")
    except TallyError as exc:
        return tally_error_response(exc)

    tallies = live_tally.get_live_tallies(polling_unit_id=unit_id)
    return JsonResponse([live_tally_payload(t) for t in tallies], safe=False)


@require_http_methods(["GET", "POST"])
@json_staff_required
def staff_live(request: HttpRequest) -> JsonResponse:
    if request.method == "POST":
        return _apply_live(request)
    return _list_live(request)


@require_http_methods(["GET", "PUT"])
@json_staff_required
def staff_unit_init(request: HttpRequest) -> JsonResponse:
    try:
        if request.method == "GET":
            unit = units.assigned_unit_for(request.user)
        else:
            try:
                data = parse_json_body(request)
            except (ValueError, json.JSONDecodeError) as exc:
                return JsonResponse({"error": str(exc)}, status=400)
            unit = units.update_unit_init(
                user=request.user,
                total_eligible=data.get("totalEligible"),
                ballots_issued=data.get("ballotsIssued"),
            )
    except TallyError as exc:
        return tally_error_response(exc)

    return JsonResponse(units.unit_payload(unit))
