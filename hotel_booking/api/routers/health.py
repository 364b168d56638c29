"""
Health check endpoints for monitoring and orchestration (K8s, Docker, etc.)

- /health: Basic liveness check (always returns 200)
- /health/live: Liveness check alias
- /health/ready: Readiness check (transport configured, circuit not open)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hotel_booking.api.dependencies import get_use_cases
from hotel_booking.config import Settings, get_settings
from hotel_booking.infrastructure.circuit_breaker import supplier_breaker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Basic liveness check.

    Returns 200 OK if the application is running.
    """
    return {"status": "ok", "service": "hotel-booking-api"}


@router.get("/health/live")
async def health_check_live():
    return {"status": "alive"}


@router.get("/health/ready")
async def health_check_ready(
    settings: Settings = Depends(get_settings),
    use_cases=Depends(get_use_cases),
):
    """
    Readiness check for K8s/orchestration.

    Checks that a supplier transport is wired and, for the HTTP transport,
    that a base URL is configured and the circuit breaker is not open.

    Returns 503 if not ready to accept requests.
    """
    health_status = {"status": "ready", "checks": {}}

    transport = use_cases.get("transport")
    if transport is None:
        health_status["checks"]["transport"] = "missing"
        health_status["status"] = "not_ready"
    elif settings.use_in_memory:
        health_status["checks"]["transport"] = "in_memory"
    elif not settings.supplier_base_url:
        health_status["checks"]["transport"] = "unconfigured"
        health_status["status"] = "not_ready"
    else:
        health_status["checks"]["transport"] = "http"

    breaker_state = supplier_breaker.current_state
    health_status["checks"]["supplier_circuit"] = breaker_state
    if breaker_state == "open":
        health_status["status"] = "not_ready"

    if health_status["status"] != "ready":
        logger.warning("Readiness check failed", extra={"checks": health_status["checks"]})
        return JSONResponse(status_code=503, content=health_status)
    return health_status
