"""Excepciones de dominio para el flujo de reservas hoteleras."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Validación ===


class BookingValidationError(DomainError):
    """Falta un dato obligatorio antes de llamar al proveedor."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(
            message=message or f"Missing required field: {field}",
            code="VALIDATION_ERROR",
        )
        self.field = field


# === Errores del Proveedor ===


class SupplierError(DomainError):
    """Error estructurado devuelto por el proveedor ({code, message})."""

    def __init__(self, code: str, message: str, http_status: int | None = None):
        super().__init__(message=message, code=code)
        self.http_status = http_status

    def __str__(self) -> str:
        if self.http_status:
            return f"[{self.code}] {self.message} (HTTP {self.http_status})"
        return f"[{self.code}] {self.message}"


class SupplierTransportError(SupplierError):
    """Falla de red, respuesta no-2xx o cuerpo que no es JSON."""


class TerminalSupplierError(SupplierError):
    """Error del proveedor que nunca se reintenta."""


class RateLimitedError(DomainError):
    """HTTP 429: el servicio está ocupado, hay que esperar N segundos."""

    def __init__(self, retry_after_seconds: int):
        super().__init__(
            message=f"Service busy, please wait {retry_after_seconds} seconds and try again",
            code="RATE_LIMITED",
        )
        self.retry_after_seconds = retry_after_seconds


class PrebookFailedError(DomainError):
    """Prebook no pudo confirmar la tarifa."""

    def __init__(self, message: str, supplier_code: str | None = None):
        super().__init__(message=message, code="PREBOOK_FAILED")
        self.supplier_code = supplier_code


# === Errores del Flujo de Reserva ===


class OrderFormRetriesExhaustedError(DomainError):
    """OrderForm agotó el presupuesto de reintentos."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        super().__init__(
            message=f"Order form failed after maximum retries ({attempts} attempts)",
            code="ORDER_FORM_MAX_RETRIES",
        )
        self.attempts = attempts
        self.last_error = last_error


class BookingSessionExpiredError(DomainError):
    """double_booking_form sin orden recuperable: la sesión debe reiniciarse."""

    def __init__(self, partner_order_id: str):
        super().__init__(
            message="Booking session expired, please start a new booking",
            code="BOOKING_SESSION_EXPIRED",
        )
        self.partner_order_id = partner_order_id


class StatusPollingTimeoutError(DomainError):
    """
    El polling agotó sus intentos sin estado terminal.

    No significa que la reserva haya fallado: el estado es desconocido.
    """

    def __init__(self, order_id: str, attempts: int, last_status: str | None = None):
        super().__init__(
            message="Status polling timeout - booking may still be processing",
            code="STATUS_POLLING_TIMEOUT",
        )
        self.order_id = order_id
        self.attempts = attempts
        self.last_status = last_status
