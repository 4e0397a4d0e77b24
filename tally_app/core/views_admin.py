import json
import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_http_methods

from core.models import SystemConfig
from core.permissions import json_admin_required
from core.system_config import get_system_config, update_system_config
from core.views_utils import get_username, parse_json_body

logger = logging.getLogger(__name__)

_CONFIG_FIELD_BY_KEY: dict[str, str] = {
    "publicViewEnabled": "public_view_enabled",
    "electionTitle": "election_title",
    "schoolName": "school_name",
}


def config_payload(config: SystemConfig) -> dict[str, object]:
    return {
        "publicViewEnabled": config.public_view_enabled,
        "electionTitle": config.election_title,
        "schoolName": config.school_name,
    }


@require_http_methods(["GET", "PUT"])
@json_admin_required
def admin_config(request: HttpRequest) -> JsonResponse:
    if request.method == "GET":
        return JsonResponse(config_payload(get_system_config()))

    try:
        data = parse_json_body(request)
    except (ValueError, json.JSONDecodeError) as exc:
        return JsonResponse({"error": str(exc)}, status=400)

    unknown = sorted(set(data) - set(_CONFIG_FIELD_BY_KEY))
    if unknown:
        return JsonResponse({"error": f"Unknown fields: {', '.join(unknown)}"}, status=400)

    if "publicViewEnabled" in data and not isinstance(data["publicViewEnabled"], bool):
        return JsonResponse({"error": "publicViewEnabled must be a boolean."}, status=400)

    changes = {_CONFIG_FIELD_BY_KEY[key]: value for key, value in data.items()}
    config = update_system_config(**changes)
    logger.info("Config changed by %s: %s", get_username(request), ", ".join(sorted(changes)) or "(none)")
    return JsonResponse(config_payload(config))
