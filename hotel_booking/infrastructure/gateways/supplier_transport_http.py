import json
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.interfaces.supplier_transport import (
    SupplierResponse,
    SupplierTransport,
)
from hotel_booking.domain.constants import (
    TRANSPORT_CIRCUIT_OPEN,
    TRANSPORT_HTTP_ERROR,
    TRANSPORT_INVALID_RESPONSE,
    TRANSPORT_NETWORK_ERROR,
)
from hotel_booking.domain.errors import RateLimitedError
from hotel_booking.infrastructure.circuit_breaker import CircuitBreakerError, supplier_breaker

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 30


class _SupplierServerError(Exception):
    """5xx response; raised inside the breaker so it counts as a failure."""

    def __init__(self, response: httpx.Response):
        super().__init__(f"Supplier responded {response.status_code}")
        self.response = response


class SupplierTransportHTTP(SupplierTransport):
    def __init__(self, base_url: str, timeout_seconds: float = 25.0) -> None:
        """
        HTTP transport to the supplier backend, protected by Circuit Breaker.

        Args:
            base_url: Base URL of the booking backend
            timeout_seconds: Per-call timeout in seconds (default: 25.0)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds

    async def call(
        self,
        endpoint: str,
        body: dict[str, Any],
        context: RequestContext | None = None,
    ) -> SupplierResponse:
        """
        POST a JSON body and normalize the answer to SupplierResponse.

        Network failures, non-JSON bodies and non-2xx statuses come back as
        an error response, never as an exception. HTTP 429 is the exception:
        it raises RateLimitedError before the body is parsed.
        """
        url = f"{self._base_url}{endpoint}"
        payload = dict(body)
        if context is not None:
            payload["userId"] = context.user_id

        try:
            with supplier_breaker.calling():
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, json=payload)
                if response.status_code >= 500:
                    raise _SupplierServerError(response)
        except CircuitBreakerError as exc:
            logger.error(
                "Supplier circuit breaker is open - service unavailable",
                extra={"endpoint": endpoint, "circuit_state": str(exc)},
            )
            return SupplierResponse.failure(
                TRANSPORT_CIRCUIT_OPEN,
                "Supplier service temporarily unavailable (circuit breaker open)",
            )
        except _SupplierServerError as exc:
            response = exc.response
        except httpx.TimeoutException as exc:
            logger.warning(
                "Supplier request timeout",
                extra={"endpoint": endpoint, "timeout": self._timeout},
            )
            return SupplierResponse.failure(TRANSPORT_NETWORK_ERROR, f"Network timeout: {exc}")
        except httpx.HTTPError as exc:
            logger.error(
                "Supplier network error",
                exc_info=exc,
                extra={"endpoint": endpoint},
            )
            return SupplierResponse.failure(TRANSPORT_NETWORK_ERROR, f"Network error: {exc}")

        if response.status_code == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(
                "Supplier rate limit hit",
                extra={"endpoint": endpoint, "retry_after": retry_after},
            )
            raise RateLimitedError(retry_after_seconds=retry_after)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            logger.error(
                "Supplier returned a non-JSON body",
                extra={"endpoint": endpoint, "http_status": response.status_code},
            )
            return SupplierResponse.failure(
                TRANSPORT_INVALID_RESPONSE,
                f"Invalid JSON response (HTTP {response.status_code})",
                response.status_code,
            )

        if 200 <= response.status_code < 300:
            return SupplierResponse.from_body(data, response.status_code)

        return _non_2xx(data, response.status_code, endpoint)


def _non_2xx(data: Any, http_status: int, endpoint: str) -> SupplierResponse:
    error = data.get("error") if isinstance(data, dict) else None
    code = TRANSPORT_HTTP_ERROR
    message = f"API Error: {http_status}"
    if isinstance(error, dict):
        code = str(error.get("code") or TRANSPORT_HTTP_ERROR)
        message = str(error.get("message") or message)
    elif isinstance(error, str) and error:
        message = error

    logger.warning(
        "Supplier returned non-2xx",
        extra={"endpoint": endpoint, "http_status": http_status, "error_code": code},
    )
    return SupplierResponse.failure(code, message, http_status)


def parse_retry_after(value: str | None) -> int:
    """Retry-After en segundos o como fecha HTTP; 30 s si falta o es inválido."""
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max(0, int((retry_at - datetime.now(timezone.utc)).total_seconds()))
