"""Interface SupplierTransport - Puerto hacia el backend del proveedor hotelero."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.domain.constants import (
    FINAL_BOOKING_FAILURE_ERRORS,
    ORDER_FORM_TERMINAL_ERRORS,
    SUPPLIER_ERROR,
    TRANSPORT_CIRCUIT_OPEN,
    TRANSPORT_HTTP_ERROR,
    TRANSPORT_INVALID_RESPONSE,
    TRANSPORT_NETWORK_ERROR,
)
from hotel_booking.domain.errors import (
    SupplierError,
    SupplierTransportError,
    TerminalSupplierError,
)

TRANSPORT_ERROR_CODES = frozenset(
    {
        TRANSPORT_NETWORK_ERROR,
        TRANSPORT_HTTP_ERROR,
        TRANSPORT_INVALID_RESPONSE,
        TRANSPORT_CIRCUIT_OPEN,
    }
)


@dataclass
class SupplierErrorBody:
    code: str
    message: str


@dataclass
class SupplierResponse:
    """
    Respuesta normalizada: siempre trae `data` o `error`.

    Las fallas HTTP (red, no-JSON, no-2xx) llegan con el mismo formato
    {code, message} para que los pasos nunca revisen el status HTTP.
    """

    data: dict[str, Any] | None = None
    error: SupplierErrorBody | None = None
    http_status: int | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> dict[str, Any]:
        """Retorna `data` o lanza el error tipado correspondiente."""
        if self.error is not None:
            raise build_supplier_error(self.error.code, self.error.message, self.http_status)
        return self.data or {}

    @classmethod
    def success(cls, data: dict[str, Any], http_status: int = 200) -> "SupplierResponse":
        return cls(data=data, http_status=http_status, raw={"status": "ok", "data": data})

    @classmethod
    def failure(
        cls, code: str, message: str, http_status: int | None = None
    ) -> "SupplierResponse":
        return cls(
            error=SupplierErrorBody(code=code, message=message),
            http_status=http_status,
            raw={"status": "error", "error": {"code": code, "message": message}},
        )

    @classmethod
    def from_body(cls, body: Any, http_status: int = 200) -> "SupplierResponse":
        """
        Interpreta un cuerpo JSON del backend.

        El error puede venir como objeto {code, message}, como string suelto,
        o solo como status "error".
        """
        if not isinstance(body, dict):
            return cls.failure(
                TRANSPORT_INVALID_RESPONSE, "Unexpected response body", http_status
            )

        error = body.get("error")
        if isinstance(error, dict) and (error.get("code") or error.get("message")):
            message = str(error.get("message") or error.get("code"))
            code = str(error.get("code") or SUPPLIER_ERROR)
            return cls(
                error=SupplierErrorBody(code=code, message=message),
                http_status=http_status,
                raw=body,
            )
        if isinstance(error, str) and error:
            return cls(
                error=SupplierErrorBody(code=error, message=error),
                http_status=http_status,
                raw=body,
            )
        if body.get("status") == "error":
            return cls(
                error=SupplierErrorBody(
                    code=SUPPLIER_ERROR, message="Supplier returned an error status"
                ),
                http_status=http_status,
                raw=body,
            )

        data = body.get("data")
        if not isinstance(data, dict):
            # algunos endpoints responden sin el envoltorio data
            data = {key: value for key, value in body.items() if key not in ("status", "success")}
        return cls(data=data, http_status=http_status, raw=body)


def build_supplier_error(
    code: str, message: str, http_status: int | None = None
) -> SupplierError:
    if code in TRANSPORT_ERROR_CODES:
        return SupplierTransportError(code=code, message=message, http_status=http_status)
    if code in ORDER_FORM_TERMINAL_ERRORS or code in FINAL_BOOKING_FAILURE_ERRORS:
        return TerminalSupplierError(code=code, message=message, http_status=http_status)
    return SupplierError(code=code, message=message, http_status=http_status)


class SupplierTransport(ABC):
    @abstractmethod
    async def call(
        self,
        endpoint: str,
        body: dict[str, Any],
        context: RequestContext | None = None,
    ) -> SupplierResponse:
        """
        Envía un POST JSON al endpoint del backend.

        Raises:
            RateLimitedError: HTTP 429, antes de intentar parsear el cuerpo.
        """
        pass
