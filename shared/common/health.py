"""
Health Check Module.

Liveness and readiness probes shared by the services.
"""
import logging
import time
from typing import Dict, Any, List

from django.db import connection
from django.core.cache import cache
from django.db.utils import Error as DatabaseError

logger = logging.getLogger(__name__)


class HealthStatus:
    """Health check status constants."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


def check_database() -> Dict[str, Any]:
    """Check database connectivity."""
    start = time.time()
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as e:
        logger.error(f"Database health check failed: {e}")
        return {"name": "database", "status": HealthStatus.UNHEALTHY, "error": str(e)}

    return {
        "name": "database",
        "status": HealthStatus.HEALTHY,
        "latency_ms": round((time.time() - start) * 1000, 2),
    }


def check_cache() -> Dict[str, Any]:
    """Check cache read/write round trip."""
    start = time.time()
    cache_key = f"health_check_{time.time()}"
    try:
        cache.set(cache_key, "OK", 10)
        value = cache.get(cache_key)
        cache.delete(cache_key)
    except Exception as e:
        # Cache backends raise their own client errors (redis, memcached).
        logger.error(f"Cache health check failed: {e}")
        return {"name": "cache", "status": HealthStatus.UNHEALTHY, "error": str(e)}

    if value != "OK":
        return {"name": "cache", "status": HealthStatus.UNHEALTHY, "error": "read/write mismatch"}

    return {
        "name": "cache",
        "status": HealthStatus.HEALTHY,
        "latency_ms": round((time.time() - start) * 1000, 2),
    }


def overall_status(checks: List[Dict[str, Any]]) -> str:
    if all(c["status"] == HealthStatus.HEALTHY for c in checks):
        return HealthStatus.HEALTHY
    return HealthStatus.UNHEALTHY
