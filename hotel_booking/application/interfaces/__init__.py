"""Interfaces (Puertos) de la capa de aplicación."""

from hotel_booking.application.interfaces.clock import Clock, FakeClock, SystemClock
from hotel_booking.application.interfaces.order_form_lock import OrderFormLock
from hotel_booking.application.interfaces.partner_order_id_generator import (
    FakePartnerOrderIdGenerator,
    PartnerOrderIdGenerator,
    RealPartnerOrderIdGenerator,
)
from hotel_booking.application.interfaces.supplier_transport import (
    SupplierErrorBody,
    SupplierResponse,
    SupplierTransport,
    build_supplier_error,
)

__all__ = [
    # Gateways
    "SupplierTransport",
    "SupplierResponse",
    "SupplierErrorBody",
    "build_supplier_error",
    # Infrastructure
    "OrderFormLock",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "PartnerOrderIdGenerator",
    "RealPartnerOrderIdGenerator",
    "FakePartnerOrderIdGenerator",
]
