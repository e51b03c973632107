"""Middleware modules for production-ready features"""
from keyrelay.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_failure,
    record_publish_result
)

__all__ = [
    "MonitoringMiddleware",
    "record_auth_failure",
    "record_publish_result"
]
