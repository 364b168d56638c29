"""
Capa de Aplicación - Flujo de completado de reservas.

Esta capa contiene los casos de uso, DTOs, interfaces (puertos) y las
políticas de reintento. Orquesta el protocolo prebook -> order form ->
order finish -> status contra el proveedor hotelero.

Estructura:
- use_cases/: Pasos del flujo y orquestador
- dtos/: Data Transfer Objects
- interfaces/: Puertos (contratos para adaptadores)
- error_classifier.py: Normalización de errores a ErrorKind
- retry.py: Políticas single_retry y bounded_backoff_retry
"""

from hotel_booking.application.dtos import (
    BookingOutcome,
    MultiroomBookingOutcome,
    OrderFinishRequest,
    OrderFormResult,
    PrebookResult,
    RequestContext,
)
from hotel_booking.application.error_classifier import ErrorKind, classify_error, user_message_for
from hotel_booking.application.interfaces import (
    Clock,
    FakeClock,
    OrderFormLock,
    PartnerOrderIdGenerator,
    SupplierResponse,
    SupplierTransport,
    SystemClock,
)
from hotel_booking.application.retry import bounded_backoff_retry, single_retry

__all__ = [
    # DTOs
    "RequestContext",
    "PrebookResult",
    "OrderFormResult",
    "OrderFinishRequest",
    "BookingOutcome",
    "MultiroomBookingOutcome",
    # Interfaces
    "SupplierTransport",
    "SupplierResponse",
    "OrderFormLock",
    "PartnerOrderIdGenerator",
    "Clock",
    "SystemClock",
    "FakeClock",
    # Errores y reintentos
    "ErrorKind",
    "classify_error",
    "user_message_for",
    "single_retry",
    "bounded_backoff_retry",
]
