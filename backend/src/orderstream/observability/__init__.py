"""Observability module for OrderStream.

Provides structured logging, correlation IDs, metrics and health checks.
"""

from .logging_config import configure_logging
from .request_id import request_id_var, get_request_id, set_request_id, generate_request_id
from .health import HealthStatus, ComponentHealth

__all__ = [
    "configure_logging",
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    "HealthStatus",
    "ComponentHealth",
]
