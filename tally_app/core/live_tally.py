"""Live (unofficial) tally counters.

Counters are snapshots, not event logs: each call adjusts one row and the
audit feed records what happened. Nothing here is reconciled against the
signature count; that is the job of ``core.submissions``.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, models, transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from core.models import AuditLog, Candidate, LiveTally, PollingUnit, TallyType
from core.tally_errors import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_DELTAS: frozenset[int] = frozenset({1, 5, -1, -5})


def _tally_label(*, tally_type: str, candidate: Candidate | None) -> str:
    if tally_type == TallyType.candidate and candidate is not None:
        return f"candidate #{candidate.number}"
    return TallyType(tally_type).label.lower()


def _normalize_request(
    *,
    polling_unit_id: object,
    candidate_id: object,
    tally_type: object,
    delta: object,
) -> tuple[int, int | None, str, int]:
    if not polling_unit_id or not tally_type:
        raise ValidationError("pollingUnitId and tallyType are required", fields=("pollingUnitId", "tallyType"))

    tally_type_value = str(tally_type)
    if tally_type_value not in TallyType.values:
        raise ValidationError(f"unknown tally type {tally_type_value!r}", fields=("tallyType",))

    # bool is an int subclass; True must not count as +1.
    if isinstance(delta, bool) or not isinstance(delta, int) or delta not in ALLOWED_DELTAS:
        raise ValidationError(f"delta must be one of {sorted(ALLOWED_DELTAS)}", fields=("delta",))

    try:
        unit_pk = int(polling_unit_id)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationError("pollingUnitId must be an integer", fields=("pollingUnitId",)) from exc

    candidate_pk: int | None = None
    if tally_type_value == TallyType.candidate:
        if candidate_id in (None, ""):
            raise ValidationError("candidateId is required for candidate tallies", fields=("candidateId",))
        try:
            candidate_pk = int(candidate_id)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValidationError("candidateId must be an integer", fields=("candidateId",)) from exc

    return unit_pk, candidate_pk, tally_type_value, int(delta)


def apply_live_delta(
    *,
    polling_unit_id: object,
    candidate_id: object,
    tally_type: object,
    delta: object,
    performed_by: str,
) -> LiveTally:
    """Adjust one live counter by ``delta``, flooring the result at zero.

    The increment is a single conditional UPDATE so concurrent devices
    cannot lose each other's updates. One LIVE_UPDATE audit entry is written
    per call, including calls where the floor swallowed the decrement.
    """
    unit_pk, candidate_pk, tally_type_value, delta_value = _normalize_request(
        polling_unit_id=polling_unit_id,
        candidate_id=candidate_id,
        tally_type=tally_type,
        delta=delta,
    )

    unit = PollingUnit.objects.only("id", "name").filter(pk=unit_pk).first()
    if unit is None:
        raise NotFoundError(f"polling unit {unit_pk} does not exist")

    candidate: Candidate | None = None
    if candidate_pk is not None:
        candidate = Candidate.objects.only("id", "number").filter(pk=candidate_pk).first()
        if candidate is None:
            raise NotFoundError(f"candidate {candidate_pk} does not exist")

    try:
        with transaction.atomic():
            tally, created = LiveTally.objects.get_or_create(
                polling_unit=unit,
                candidate=candidate,
                tally_type=tally_type_value,
                defaults={"count": max(0, delta_value)},
            )
            if not created:
                LiveTally.objects.filter(pk=tally.pk).update(
                    count=Greatest(
                        F("count") + Value(delta_value),
                        Value(0),
                        output_field=models.PositiveIntegerField(),
                    ),
                    updated_at=timezone.now(),
                )
                tally.refresh_from_db(fields=["count", "updated_at"])

            sign = "+" if delta_value > 0 else ""
            AuditLog.objects.create(
                action=AuditLog.Action.live_update,
                polling_unit=unit.name,
                details=(
                    f"Live count: {_tally_label(tally_type=tally_type_value, candidate=candidate)} "
                    f"{sign}{delta_value} (total: {tally.count})"
                ),
                performed_by=performed_by,
            )
    except DatabaseError as exc:
        logger.exception("Live tally update failed for unit %s", unit_pk)
        raise StoreError("live tally update failed") from exc

    logger.info(
        "Live tally unit=%s type=%s candidate=%s delta=%+d total=%d by=%s",
        unit_pk,
        tally_type_value,
        candidate_pk,
        delta_value,
        tally.count,
        performed_by,
    )
    return tally


def get_live_tallies(*, polling_unit_id: int | None = None) -> list[LiveTally]:
    qs = LiveTally.objects.select_related("candidate", "polling_unit")
    if polling_unit_id is not None:
        qs = qs.filter(polling_unit_id=polling_unit_id)
    return list(qs.order_by("polling_unit_id", "tally_type", "candidate__number", "id"))
