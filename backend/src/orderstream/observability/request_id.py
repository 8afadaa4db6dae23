"""Correlation ID management.

HTTP requests carry a request ID; the ingestion worker uses the feed message
ID. Both are stored in the same context variable so every log line emitted
while handling them can be correlated.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for the correlation id (thread- and async-safe)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID.

    Returns:
        str: UUID v4 request ID
    """
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Get current correlation ID from context.

    Returns:
        str: Current ID or "no-request-id" if not set
    """
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: Optional[str]) -> None:
    """Set correlation ID in current context.

    Args:
        request_id: ID to set, or None to clear
    """
    request_id_var.set(request_id)
