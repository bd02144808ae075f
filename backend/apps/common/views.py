import time
import uuid

from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.db.utils import OperationalError
from django.http import JsonResponse

from .logger import get_logger

logger = get_logger(__name__).bind(component="common", layer="health")

CACHE_CHECK_KEY = "health:ready"

# Settings whose absence disables a storefront feature without taking the API down.
INTEGRATION_SETTINGS = {
    "payments": "STRIPE_SECRET_KEY",
    "newsletter": "SYSTEME_API_KEY",
    "orderNotifications": "ORDER_NOTIFICATION_EMAIL",
}


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 2)


def _db_check(alias="default"):
    started = time.monotonic()
    try:
        connections[alias].cursor().execute("SELECT 1")
    except OperationalError as e:
        logger.warning("Database health check failed", alias=alias, error=str(e))
        return {"status": "fail", "error": str(e)}
    except Exception as e:
        logger.error(
            "Database health check failed unexpectedly",
            alias=alias,
            error=str(e),
            exception=e.__class__.__name__,
        )
        return {"status": "fail", "error": str(e), "exception": e.__class__.__name__}
    latency = _elapsed_ms(started)
    logger.debug("Database health check succeeded", alias=alias, latency_ms=latency)
    return {"status": "ok", "latency_ms": latency}


def _cache_check():
    """Round-trip a token through the product-listing cache.

    The Redis backend ignores connection errors, so an outage shows up as a
    missing value rather than an exception.
    """
    started = time.monotonic()
    token = uuid.uuid4().hex
    try:
        cache.set(CACHE_CHECK_KEY, token, timeout=5)
        found = cache.get(CACHE_CHECK_KEY)
    except Exception as e:
        logger.warning("Cache health check failed", error=str(e))
        return {"status": "fail", "error": str(e)}
    if found != token:
        logger.warning("Cache health check lost its token")
        return {"status": "fail", "error": "cache did not return the stored value"}
    return {"status": "ok", "latency_ms": _elapsed_ms(started)}


def _integrations():
    return {
        name: "configured" if getattr(settings, setting, "") else "missing"
        for name, setting in INTEGRATION_SETTINGS.items()
    }


def live_health(request):
    """Liveness: the process is up and serving requests."""
    return JsonResponse({"status": "alive"})


def ready_health(request):
    """Readiness: database and cache must answer; integrations are reported only."""
    checks = {"database": _db_check(), "cache": _cache_check()}
    failing = [name for name, result in checks.items() if result["status"] == "fail"]
    overall_status = "degraded" if failing else "ok"
    payload = {"status": overall_status, "checks": checks, "integrations": _integrations()}
    logger.info("Readiness evaluated", status=overall_status, failing_components=failing)
    return JsonResponse(payload, status=503 if failing else 200)
