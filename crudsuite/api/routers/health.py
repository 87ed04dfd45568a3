"""
Health Check Endpoints
Liveness, database readiness and latency metrics.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import APISettings, get_settings
from ..dependencies import get_db
from ..middleware.timing import get_latency_tracker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(
    settings: APISettings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    """
    Health check with a database ping.

    Returns 503 with ``status: degraded`` when the database is unreachable.
    """
    body: Dict[str, Any] = {
        "status": "healthy",
        "version": settings.version,
        "timestamp": datetime.utcnow().isoformat(),
    }

    try:
        db.execute(text("SELECT 1"))
        body["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        body["database"] = "unhealthy"
        body["status"] = "degraded"
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)

    return body


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> Dict[str, str]:
    return {"status": "alive", "timestamp": datetime.utcnow().isoformat()}


@router.get("/metrics", status_code=status.HTTP_200_OK)
async def get_metrics(settings: APISettings = Depends(get_settings)) -> Dict[str, Any]:
    """
    Latency percentiles over the recent request window.

    Returns:
        Request counts by status class and latency statistics
    """
    tracker = get_latency_tracker()
    stats = tracker.get_stats()

    return {
        "requests": {
            "total": stats["total"],
            "window": stats["count"],
            "by_status": tracker.get_status_counts(),
        },
        "latency": {
            "p50_ms": round(stats["p50"], 2),
            "p95_ms": round(stats["p95"], 2),
            "p99_ms": round(stats["p99"], 2),
            "mean_ms": round(stats["mean"], 2),
            "min_ms": round(stats["min"], 2),
            "max_ms": round(stats["max"], 2),
            "target_p95_ms": settings.target_p95_latency_ms,
            "meets_target": stats["p95"] <= settings.target_p95_latency_ms,
        },
        "timestamp": datetime.utcnow().isoformat(),
    }
