"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from invoiceflow.application.dto.responses import DatabaseHealthResponse, HealthResponse
from invoiceflow.config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check with database connectivity.

    Reports "unhealthy" when SQLite cannot answer a trivial query.
    """
    from invoiceflow.infrastructure.storage.sqlite import get_pool

    settings = get_settings()

    try:
        pool = await get_pool()
        db_status = DatabaseHealthResponse(available=True, latency_ms=await pool.ping())
    except Exception as e:
        db_status = DatabaseHealthResponse(available=False, error=str(e))

    return HealthResponse(
        status="healthy" if db_status.available else "unhealthy",
        version=settings.app_version,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
        settlement_policy_configured=settings.settlement.is_configured,
    )
