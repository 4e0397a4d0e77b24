"""Polling unit set-up performed by the unit's assigned staff member."""

import logging

from django.db import transaction

from core.models import MAX_COUNT, PollingUnit, User
from core.tally_errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def assigned_unit_for(user: User) -> PollingUnit:
    if not user.polling_unit_id:
        raise ValidationError("user is not assigned to a polling unit", fields=("pollingUnitId",))
    unit = PollingUnit.objects.filter(pk=user.polling_unit_id).first()
    if unit is None:
        raise NotFoundError(f"polling unit {user.polling_unit_id} does not exist")
    return unit


def _non_negative(value: object, *, field: str) -> int:
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


@transaction.atomic
def update_unit_init(*, user: User, total_eligible: object, ballots_issued: object) -> PollingUnit:
    unit = assigned_unit_for(user)
    unit = PollingUnit.objects.select_for_update().get(pk=unit.pk)
    unit.total_eligible = _non_negative(total_eligible, field="totalEligible")
    unit.ballots_issued = _non_negative(ballots_issued, field="ballotsIssued")
    unit.save(update_fields=["total_eligible", "ballots_issued", "updated_at"])
    logger.info(
        "Unit %s initialised by %s: eligible=%d ballots=%d",
        unit.pk,
        user.get_username(),
        unit.total_eligible,
        unit.ballots_issued,
    )
    return unit


def unit_payload(unit: PollingUnit) -> dict[str, object]:
    return {
        "id": unit.id,
        "name": unit.name,
        "grade": unit.grade,
        "totalEligible": unit.total_eligible,
        "ballotsIssued": unit.ballots_issued,
    }
