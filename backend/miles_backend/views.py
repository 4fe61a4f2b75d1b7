import redis
from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from channels.layers import get_channel_layer

from service_requests.models import ServiceRequest
from service_requests.tasks import sweep_expired_matches_task


@api_view(["GET"])
def health_check(request):
    """Health check endpoint for monitoring system status"""

    health_status = {
        "status": "healthy",
        "timestamp": timezone.now().isoformat(),
        "services": {},
        # Which external providers are configured (values are never exposed)
        "config": {
            "geocoding": bool(settings.GOOGLE_MAPS_API_KEY),
            "email": bool(settings.RESEND_API_KEY),
            "line": bool(settings.LINE_CHANNEL_ACCESS_TOKEN),
            "internal_token": bool(settings.INTERNAL_API_TOKEN),
            "app_base_url": settings.APP_BASE_URL,
        },
    }

    # Database check
    try:
        ServiceRequest.objects.count()
        health_status["services"]["database"] = "healthy"
    except Exception as e:
        health_status["services"]["database"] = f"unhealthy: {e}"
        health_status["status"] = "unhealthy"

    # Redis check (broker + production channel layer)
    try:
        redis_client = redis.Redis.from_url(settings.REDIS_URL, socket_timeout=3)
        redis_client.ping()
        health_status["services"]["redis"] = "healthy"
    except Exception as e:
        health_status["services"]["redis"] = f"unhealthy: {e}"
        health_status["status"] = "unhealthy"

    # Channel layer check
    try:
        channel_layer = get_channel_layer()
        if channel_layer is not None:
            health_status["services"]["channels"] = "healthy"
        else:
            health_status["services"]["channels"] = "unhealthy: no channel layer"
            health_status["status"] = "unhealthy"
    except Exception as e:
        health_status["services"]["channels"] = f"unhealthy: {e}"
        health_status["status"] = "unhealthy"

    # Celery check
    try:
        if sweep_expired_matches_task:
            health_status["services"]["celery"] = "healthy"
        else:
            health_status["services"]["celery"] = "unhealthy: task not registered"
            health_status["status"] = "unhealthy"
    except Exception as e:
        health_status["services"]["celery"] = f"unhealthy: {e}"
        health_status["status"] = "unhealthy"

    status_code = (
        status.HTTP_200_OK
        if health_status["status"] == "healthy"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )

    return Response(health_status, status=status_code)
