"""Health check endpoints"""
import time
from datetime import datetime, timezone
from typing import Any, Dict

import redis.asyncio as redis
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from keyrelay.database import get_redis

router = APIRouter(prefix="/health", tags=["health"])

# Track startup time
STARTUP_TIME = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check():
    """
    Basic health check endpoint

    Returns 200 if service is running
    """
    return {
        "status": "healthy",
        "service": "KeyRelay",
        "version": "0.1.0",
        "timestamp": _now()
    }


@router.get("/ready")
async def readiness_check(client: redis.Redis = Depends(get_redis)) -> Dict[str, Any]:
    """
    Readiness check - verifies Redis is reachable

    Returns 200 if ready to serve traffic, 503 if not ready
    """
    checks = {
        "redis": False,
        "redis_latency_ms": None
    }

    try:
        start = time.time()
        await client.ping()
        latency_ms = (time.time() - start) * 1000
        checks["redis"] = True
        checks["redis_latency_ms"] = round(latency_ms, 2)
    except RedisError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "checks": checks,
                "message": f"Redis check failed: {e.__class__.__name__}"
            }
        )

    return {
        "status": "ready",
        "checks": checks,
        "timestamp": _now()
    }


@router.get("/live")
def liveness_check():
    """
    Liveness check - verifies service is alive

    Used by Kubernetes liveness probe
    """
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": _now()
    }
