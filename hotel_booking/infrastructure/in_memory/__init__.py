"""Implementaciones in-memory para testing y modo demo."""

from hotel_booking.infrastructure.in_memory.order_form_lock import InMemoryOrderFormLock
from hotel_booking.infrastructure.in_memory.supplier_transport import (
    LostResponse,
    StubSupplierTransport,
)

__all__ = [
    # Gateways
    "StubSupplierTransport",
    "LostResponse",
    # Infrastructure
    "InMemoryOrderFormLock",
]
