"""
Infrastructure endpoints and shared view helpers.

failure_response maps ServiceResult error codes onto HTTP statuses so the
chat and tryout views answer failures the same way.
"""

from django.db import connection
from django.http import JsonResponse
from rest_framework import status
from rest_framework.response import Response

ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "CHAT_LOCKED": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "TRANSIENT_FAILURE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def failure_response(result) -> Response:
    """Response for a failed ServiceResult; unknown codes are a 400."""
    body = {"error": result.error, "error_code": result.error_code}
    if result.errors:
        body["errors"] = result.errors
    return Response(
        body,
        status=ERROR_STATUS.get(result.error_code, status.HTTP_400_BAD_REQUEST),
    )


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - cache: "connected" or "disconnected" (optional)

    HTTP Status Codes:
        200: All systems operational
        503: One or more systems unhealthy

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "cache": "connected"
        }
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
        "channel_layer": "unknown",
    }
    is_healthy = True

    # Check database connectivity
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    # Cache is Redis in deployment, local memory otherwise
    try:
        from django.core.cache import cache

        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") == "ok":
            health_status["cache"] = "connected"
        else:
            health_status["cache"] = "disconnected"
            # Cache failure is not critical - mark as degraded but still healthy
    except Exception:
        health_status["cache"] = "disconnected"
        # Don't fail health check for cache issues (graceful degradation)

    # Channel layer carries every realtime event
    from channels.layers import get_channel_layer

    layer = get_channel_layer()
    health_status["channel_layer"] = layer.__class__.__name__ if layer else "missing"

    # Return appropriate HTTP status
    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
