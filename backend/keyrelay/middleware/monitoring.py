"""Monitoring and observability middleware"""
import secrets
import time
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from keyrelay.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "keyrelay_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "keyrelay_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Error metrics
http_errors_total = Counter(
    "keyrelay_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

authentication_failures_total = Counter(
    "keyrelay_authentication_failures_total",
    "Total authentication failures",
    ["type"]  # admin, api_key, publish
)

# Publishing metrics
publish_results_total = Counter(
    "keyrelay_publish_results_total",
    "Per-platform publish outcomes",
    ["platform", "success"]
)


def route_template(request: Request) -> str:
    """Path template of the matched route, e.g. ``/publish/{platform}``.

    Unmatched paths fall back to the raw path.
    """
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return request.url.path


def _observe(method: str, endpoint: str, status: int, duration: float) -> None:
    http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
    if status >= 400:
        http_errors_total.labels(method=method, endpoint=endpoint, status=status).inc()


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Request ids, timing headers and per-route Prometheus metrics"""

    def __init__(self, app, slow_request_seconds: float = 5.0):
        super().__init__(app)
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        request_id = request.headers.get("x-request-id") or f"req_{secrets.token_hex(8)}"
        request.state.request_id = request_id
        endpoint = route_template(request)

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start
            _observe(request.method, endpoint, 500, duration)
            logger.error(
                f"Request failed: {request.method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "endpoint": endpoint,
                    "duration": duration,
                    "error": str(e)
                },
                exc_info=True
            )
            raise

        duration = time.perf_counter() - start
        _observe(request.method, endpoint, response.status_code, duration)

        if duration > self.slow_request_seconds:
            logger.warning(
                f"Slow request detected: {request.method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "endpoint": endpoint,
                    "duration": duration,
                    "status": response.status_code
                }
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_auth_failure(auth_type: str):
    """Record authentication failure"""
    authentication_failures_total.labels(type=auth_type).inc()


def record_publish_result(platform: str, success: bool):
    """Record a single platform's publish outcome"""
    publish_results_total.labels(
        platform=platform,
        success=str(success)
    ).inc()
