from django.conf import settings

from core.models import AuditLog

AUDIT_FEED_MAX_LIMIT = 500


def parse_feed_limit(raw: object) -> int:
    default = int(settings.TALLY_AUDIT_FEED_DEFAULT_LIMIT)
    try:
        limit = int(str(raw)) if raw not in (None, "") else default
    except ValueError:
        limit = default
    return max(1, min(limit, AUDIT_FEED_MAX_LIMIT))


def recent_audit_entries(*, limit: int) -> list[AuditLog]:
    return list(AuditLog.objects.order_by("-created_at", "-id")[:limit])


def audit_entry_payload(entry: AuditLog) -> dict[str, object]:
    return {
        "id": entry.id,
        "action": entry.action,
        "pollingUnit": entry.polling_unit,
        "round": entry.round,
        "details": entry.details,
        "reason": entry.reason,
        "performedBy": entry.performed_by,
        "createdAt": entry.created_at.isoformat(),
    }
