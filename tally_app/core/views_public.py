"""Read-only public endpoints backing the results dashboard and reports."""

import logging

from django.db import DatabaseError
from django.http import Http404, HttpRequest, HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET

from core.audit_feed import audit_entry_payload, parse_feed_limit, recent_audit_entries
from core.exports import build_results_dataset
from core.models import Candidate, PollingUnit
from core.results import build_chart_data, build_public_results
from core.system_config import public_view_enabled
from core.units import unit_payload

logger = logging.getLogger(__name__)

EXPORT_FORMATS: frozenset[str] = frozenset({"csv", "json"})


@never_cache
@require_GET
def public_results(_request: HttpRequest) -> JsonResponse:
    try:
        payload = build_public_results()
    except DatabaseError:
        logger.exception("Public results aggregation failed")
        return JsonResponse({"error": "Results are temporarily unavailable."}, status=503)
    return JsonResponse(payload)


@never_cache
@require_GET
def public_chart_data(_request: HttpRequest) -> JsonResponse:
    return JsonResponse(build_chart_data())


@never_cache
@require_GET
def public_audit_feed(request: HttpRequest) -> JsonResponse:
    limit = parse_feed_limit(request.GET.get("limit"))
    entries = recent_audit_entries(limit=limit)
    return JsonResponse([audit_entry_payload(e) for e in entries], safe=False)


@require_GET
def public_results_export(_request: HttpRequest, export_format: str) -> HttpResponse:
    if export_format not in EXPORT_FORMATS:
        raise Http404("Unsupported export format")
    if not public_view_enabled():
        return JsonResponse({"enabled": False}, status=404)

    dataset = build_results_dataset()
    stamp = timezone.now().strftime("%Y%m%d-%H%M")
    if export_format == "csv":
        response = HttpResponse(dataset.export("csv"), content_type="text/csv; charset=utf-8")
    else:
        response = HttpResponse(dataset.export("json"), content_type="application/json")
    response["Content-Disposition"] = f'attachment; filename="results-{stamp}.{export_format}"'
    return response


@require_GET
def candidates_list(_request: HttpRequest) -> JsonResponse:
    candidates = [
        {
            "id": c.id,
            "number": c.number,
            "name": c.name,
            "partyName": c.party_name,
            "photoUrl": c.photo_url or None,
            "themeColor": c.theme_color,
        }
        for c in Candidate.objects.order_by("number", "id")
    ]
    return JsonResponse(candidates, safe=False)


@require_GET
def units_list(_request: HttpRequest) -> JsonResponse:
    return JsonResponse([unit_payload(u) for u in PollingUnit.objects.order_by("grade", "name", "id")], safe=False)
