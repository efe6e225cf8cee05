"""
JSON API for service info, statistics and manual checks.

Every endpoint requires ``Authorization: Bearer <API_BEARER_TOKEN>``.
"""
import hmac
import logging
from datetime import datetime, timezone as dt_timezone
from functools import wraps

from django.core.exceptions import ImproperlyConfigured
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from uptime.config import get_monitor_config
from uptime.services.service import build_monitoring_service

logger = logging.getLogger(__name__)


def _has_valid_token(request, expected_token: str) -> bool:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return False
    token = auth_header.removeprefix("Bearer ")
    return hmac.compare_digest(token, expected_token)


def api_endpoint(view):
    """
    Resolve config, enforce bearer auth and hand the view a service.

    Configuration errors become a 500 JSON response.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            config = get_monitor_config()
        except ImproperlyConfigured as e:
            logger.error(f"Configuration error: {e}")
            return JsonResponse(
                {"error": "Configuration error", "message": str(e)}, status=500
            )

        if not _has_valid_token(request, config.api_bearer_token):
            return HttpResponse("Unauthorized", status=401)

        try:
            service = build_monitoring_service(config)
        except ImproperlyConfigured as e:
            logger.error(f"Configuration error: {e}")
            return JsonResponse(
                {"error": "Configuration error", "message": str(e)}, status=500
            )

        return view(request, service, *args, **kwargs)

    return wrapper


def _parse_epoch_ms(value: str | None) -> datetime | None:
    """Parse an epoch-milliseconds query parameter; bad values are ignored."""
    if not value:
        return None
    try:
        millis = int(value)
    except ValueError:
        return None
    if millis <= 0:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=dt_timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


@require_GET
@api_endpoint
def service_info(request, service):
    """Name, target and current status of the monitored service."""
    try:
        stats = service.get_stats()
    except Exception as e:
        logger.exception("Failed to get service info")
        return JsonResponse(
            {"error": "Failed to get service info", "message": str(e)}, status=500
        )

    return JsonResponse({
        "service": service.config.service_name,
        "target": service.config.target_url,
        "status": stats.current_status,
        "lastCheck": stats.to_dict()["lastCheckTime"],
    })


@require_GET
@api_endpoint
def stats(request, service):
    """Statistics for ``?start=&end=`` (epoch ms), default last 24 hours."""
    start = _parse_epoch_ms(request.GET.get("start"))
    end = _parse_epoch_ms(request.GET.get("end"))

    try:
        result = service.get_stats(start, end)
    except Exception as e:
        logger.exception("Failed to fetch statistics")
        return JsonResponse(
            {"error": "Failed to fetch statistics", "message": str(e)}, status=500
        )

    return JsonResponse(result.to_dict())


@csrf_exempt
@require_POST
@api_endpoint
def trigger_check(request, service):
    """Run one check immediately and return the stored record."""
    try:
        record = service.process_check()
    except Exception as e:
        logger.exception("Manual check failed")
        return JsonResponse(
            {"error": "Failed to perform check", "message": str(e)}, status=500
        )

    return JsonResponse({
        "success": True,
        "result": record.to_dict(),
        "message": f"Check completed. Status: {record.status.upper()}",
    })
