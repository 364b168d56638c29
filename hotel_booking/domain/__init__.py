"""
Capa de Dominio - Reservas hoteleras B2B.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Entidades del dominio (BookedRate, MultiroomBatch, OrderStatusSnapshot, ...)
- value_objects/: Objetos de valor inmutables (Money, PartnerOrderId)
- errors.py: Excepciones específicas del dominio
- constants.py: Endpoints, estados y tablas de códigos de error
"""

from hotel_booking.domain.entities import (
    BookedRate,
    FailedRoom,
    Guest,
    MultiroomBatch,
    OrderStatusSnapshot,
    RoomOccupancy,
    is_terminal_status,
)
from hotel_booking.domain.errors import (
    BookingSessionExpiredError,
    BookingValidationError,
    DomainError,
    OrderFormRetriesExhaustedError,
    PrebookFailedError,
    RateLimitedError,
    StatusPollingTimeoutError,
    SupplierError,
    SupplierTransportError,
    TerminalSupplierError,
)
from hotel_booking.domain.value_objects import Money, PartnerOrderId

__all__ = [
    # Entities
    "BookedRate",
    "FailedRoom",
    "Guest",
    "MultiroomBatch",
    "OrderStatusSnapshot",
    "RoomOccupancy",
    "is_terminal_status",
    # Value Objects
    "Money",
    "PartnerOrderId",
    # Errors
    "DomainError",
    "BookingValidationError",
    "SupplierError",
    "SupplierTransportError",
    "TerminalSupplierError",
    "RateLimitedError",
    "PrebookFailedError",
    "OrderFormRetriesExhaustedError",
    "BookingSessionExpiredError",
    "StatusPollingTimeoutError",
]
