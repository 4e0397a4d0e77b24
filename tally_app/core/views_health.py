from __future__ import annotations

import logging

from django.db import DatabaseError, connection
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from core.models import SYSTEM_CONFIG_PK, SystemConfig

logger = logging.getLogger(__name__)


@require_GET
def healthz(_request: HttpRequest) -> JsonResponse:
    return JsonResponse({"status": "ok"})


@require_GET
def readyz(_request: HttpRequest) -> JsonResponse:
    try:
        connection.ensure_connection()
        config_seeded = SystemConfig.objects.filter(pk=SYSTEM_CONFIG_PK).exists()
    except DatabaseError as exc:
        logger.exception("Health check readyz failed")
        return JsonResponse({"status": "not ready", "error": str(exc)}, status=503)

    if not config_seeded:
        logger.warning("Health check readyz: system configuration has not been seeded")
        return JsonResponse({"status": "not ready", "error": "system configuration missing"}, status=503)

    return JsonResponse({"status": "ready", "database": "ok"})
