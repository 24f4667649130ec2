"""
API health check endpoints.
"""

import time
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.webhooks import WebhookManager, get_webhook_manager
from app.db.session import get_db

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Individual health check result."""
    name: str
    status: HealthStatus
    response_time: float
    message: str
    details: Optional[Dict[str, Any]] = None


def _check_database(db: Session) -> HealthCheckResult:
    start = time.time()
    try:
        db.execute(text("SELECT 1"))
        return HealthCheckResult("database", HealthStatus.HEALTHY, time.time() - start, "Database reachable")
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return HealthCheckResult("database", HealthStatus.UNHEALTHY, time.time() - start, str(e))


@router.get("")
async def health(
    db: Session = Depends(get_db),
    manager: WebhookManager = Depends(get_webhook_manager),
):
    """Report database reachability and webhook client state."""
    checks = [
        _check_database(db),
        HealthCheckResult(
            "webhooks",
            HealthStatus.HEALTHY,
            0.0,
            "HTTP client open" if manager.client is not None else "HTTP client opens on first delivery",
        ),
    ]
    overall = (
        HealthStatus.HEALTHY
        if all(check.status == HealthStatus.HEALTHY for check in checks)
        else HealthStatus.UNHEALTHY
    )

    return JSONResponse(
        status_code=200 if overall == HealthStatus.HEALTHY else 503,
        content={
            "status": overall.value,
            "version": settings.VERSION,
            "checks": [{**asdict(check), "status": check.status.value} for check in checks],
        },
    )
