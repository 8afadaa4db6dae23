"""FastAPI dependencies resolving the objects built at startup.

The lifespan handler in main.py stores the wired components on app.state;
tests replace these dependencies through app.dependency_overrides.
"""

from typing import Generator, Optional

from fastapi import HTTPException, Request, status
from redis import Redis
from sqlalchemy.orm import Session

from .orders.service import OrderQueryService


def _component(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return component


def get_order_service(request: Request) -> OrderQueryService:
    """Order lookup service built at startup."""
    return _component(request, "order_service")


def get_db(request: Request) -> Generator[Session, None, None]:
    """Database session for health probes."""
    session_factory = _component(request, "session_factory")
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def get_redis_client(request: Request) -> Optional[Redis]:
    """Redis client of the ingestion feed, or None when ingestion is disabled."""
    return getattr(request.app.state, "redis", None)
