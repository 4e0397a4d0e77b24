"""Session login for staff and admins, plus the presence heartbeat."""

import json
import logging
import secrets

from django.contrib.auth import authenticate, login, logout
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST

from core.middleware import SESSION_TOKEN_KEY
from core.models import User
from core.permissions import json_staff_required
from core.views_utils import parse_json_body

logger = logging.getLogger(__name__)


def user_payload(user: User) -> dict[str, object]:
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "name": user.display_name or user.username,
        "pollingUnitId": user.polling_unit_id,
    }


@ensure_csrf_cookie
@require_GET
def auth_session(request: HttpRequest) -> JsonResponse:
    if not request.user.is_authenticated:
        return JsonResponse({"authenticated": False})
    return JsonResponse({"authenticated": True, "user": user_payload(request.user)})


@require_POST
def auth_login(request: HttpRequest) -> JsonResponse:
    try:
        data = parse_json_body(request)
    except (ValueError, json.JSONDecodeError) as exc:
        return JsonResponse({"error": str(exc)}, status=400)

    username = str(data.get("username") or "").strip()
    password = str(data.get("password") or "")
    if not username or not password:
        return JsonResponse({"error": "Username and password are required."}, status=400)

    user = authenticate(request, username=username, password=password)
    if user is None:
        logger.info("Failed login for %r", username)
        return JsonResponse({"error": "Invalid username or password."}, status=401)

    login(request, user)

    # Binding the session to a fresh token signs out any other device.
    token = secrets.token_hex(32)
    user.active_session_token = token
    user.last_seen = timezone.now()
    user.save(update_fields=["active_session_token", "last_seen"])
    request.session[SESSION_TOKEN_KEY] = token

    logger.info("Login for %s (%s)", user.username, user.role)
    return JsonResponse({"success": True, "user": user_payload(user)})


@require_POST
def auth_logout(request: HttpRequest) -> JsonResponse:
    user = request.user
    if user.is_authenticated:
        User.objects.filter(pk=user.pk).update(active_session_token="")
    logout(request)
    return JsonResponse({"success": True})


@require_POST
@json_staff_required
def auth_heartbeat(request: HttpRequest) -> JsonResponse:
    User.objects.filter(pk=request.user.pk).update(last_seen=timezone.now())
    return JsonResponse({"success": True})
