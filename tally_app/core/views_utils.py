"""Shared view utilities: JSON bodies, identity, error responses."""

import json
import logging

from django.http import HttpRequest, JsonResponse

from core.tally_errors import (
    BalanceError,
    ConflictError,
    MissingReasonError,
    NotFoundError,
    StoreError,
    TallyError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MSG_BALANCE_MISMATCH = (
    "Totals do not match: counted {counted} but {signatures} voters signed (difference {difference}). "
    "Please recount or state a reason."
)
MSG_REASON_REQUIRED = "Please state a reason for amending the result (recount)."
MSG_STORE_UNAVAILABLE = "The result could not be saved right now. Please check the current round and try again."
MSG_ROUND_CONFLICT = "Another submission for this unit was saved first. Reload the current round and resubmit."


def parse_json_body(request: HttpRequest) -> dict[str, object]:
    """Decode a JSON object request body, raising ValueError when it is not one."""
    raw = request.body.decode("utf-8") if request.body else "{}"
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    return data


def get_username(request: HttpRequest) -> str:
    user = getattr(request, "user", None)
    if user is None or not getattr(user, "is_authenticated", False):
        return ""
    return str(user.get_username() or "").strip()


def parse_optional_int(raw: object, *, field: str) -> int | None:
    value = str(raw or "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer", fields=(field,)) from exc


def tally_error_response(exc: TallyError) -> JsonResponse:
    """Map a service error kind to its HTTP status and user-facing message."""
    payload = exc.as_payload()
    match exc:
        case BalanceError():
            payload["error"] = MSG_BALANCE_MISMATCH.format(
                counted=exc.total_counted,
                signatures=exc.total_signatures,
                difference=exc.difference,
            )
            status = 400
        case MissingReasonError():
            payload["error"] = MSG_REASON_REQUIRED
            status = 400
        case ValidationError():
            status = 400
        case NotFoundError():
            status = 404
        case ConflictError():
            payload["error"] = MSG_ROUND_CONFLICT
            status = 409
        case StoreError():
            payload["error"] = MSG_STORE_UNAVAILABLE
            status = 503
        case _:
            logger.error("Unmapped tally error %s", type(exc).__name__)
            status = 500
    return JsonResponse(payload, status=status)
