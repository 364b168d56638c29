import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from hotel_booking.api.routers.bookings import router as bookings_router
from hotel_booking.api.routers.health import router as health_router
from hotel_booking.application.error_classifier import user_message_for
from hotel_booking.config import get_settings
from hotel_booking.domain.errors import (
    BookingSessionExpiredError,
    BookingValidationError,
    DomainError,
    OrderFormRetriesExhaustedError,
    RateLimitedError,
    StatusPollingTimeoutError,
    SupplierTransportError,
    TerminalSupplierError,
)
from hotel_booking.infrastructure.circuit_breaker import configure_supplier_breaker

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_supplier_breaker(
        fail_max=settings.supplier_breaker_fail_max,
        reset_timeout=settings.supplier_breaker_reset_timeout,
    )
    logger.info(
        "Hotel booking API started",
        extra={"use_in_memory": settings.use_in_memory, "supplier_base_url": settings.supplier_base_url},
    )
    yield


app = FastAPI(
    title="Hotel Booking API",
    version="1.0.0",
    lifespan=lifespan
)


def _error_body(exc: DomainError, **extra) -> dict:
    return {"detail": exc.message, "code": exc.code, **extra}


@app.exception_handler(BookingValidationError)
async def validation_error_handler(request: Request, exc: BookingValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_body(exc, field=exc.field),
    )


@app.exception_handler(TerminalSupplierError)
async def terminal_supplier_error_handler(request: Request, exc: TerminalSupplierError):
    logger.warning(
        "Terminal supplier error",
        extra={"path": request.url.path, "error_code": exc.code},
    )
    return JSONResponse(
        status_code=422,
        content=_error_body(exc, message=user_message_for(exc.code)),
    )


@app.exception_handler(RateLimitedError)
async def rate_limited_handler(request: Request, exc: RateLimitedError):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body(exc, retry_after_seconds=exc.retry_after_seconds),
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


@app.exception_handler(BookingSessionExpiredError)
async def session_expired_handler(request: Request, exc: BookingSessionExpiredError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body(exc, partner_order_id=exc.partner_order_id),
    )


@app.exception_handler(OrderFormRetriesExhaustedError)
async def retries_exhausted_handler(request: Request, exc: OrderFormRetriesExhaustedError):
    logger.error(
        "Order form retries exhausted",
        extra={"path": request.url.path, "attempts": exc.attempts, "last_error": str(exc.last_error)},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_body(exc, attempts=exc.attempts),
    )


@app.exception_handler(StatusPollingTimeoutError)
async def polling_timeout_handler(request: Request, exc: StatusPollingTimeoutError):
    # estado desconocido, no es un fallo de la reserva
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content={
            "order_id": exc.order_id,
            "status": "unknown",
            "last_status": exc.last_status,
            "attempts": exc.attempts,
            "detail": exc.message,
        },
    )


@app.exception_handler(SupplierTransportError)
async def supplier_transport_error_handler(request: Request, exc: SupplierTransportError):
    logger.error(
        "Supplier transport error",
        extra={"path": request.url.path, "error_code": exc.code, "http_status": exc.http_status},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_body(exc),
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(exc),
    )


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, prefix="/api/v1/bookings", tags=["Bookings"])
