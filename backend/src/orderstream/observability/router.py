"""Observability API endpoints: metrics, health and readiness."""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from redis import Redis
from sqlalchemy.orm import Session

from ..dependencies import get_db, get_redis_client
from .health import (
    check_database_health,
    check_redis_health,
    get_overall_health,
    HealthStatus,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Returns health status of the database and the Redis feed",
)
def health_check(
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client),
):
    """Check health of all system components.

    Returns 200 unless a component is unhealthy, in which case 503.
    """
    components = {
        "database": check_database_health(db),
        "redis": check_redis_health(redis_client),
    }

    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        }
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503

    return JSONResponse(content=response_data, status_code=status_code)


@router.get(
    "/ready",
    summary="Readiness check endpoint",
    description="Returns readiness status (database reachable)",
)
def readiness_check(db: Session = Depends(get_db)):
    """Check if the application can serve order lookups."""
    db_health = check_database_health(db)

    if db_health.status == HealthStatus.HEALTHY:
        return {"status": "ready"}

    return JSONResponse(
        content={"status": "not_ready", "message": db_health.message},
        status_code=503
    )
