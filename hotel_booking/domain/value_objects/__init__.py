"""Value Objects del dominio de reservas."""

from hotel_booking.domain.value_objects.money import Money
from hotel_booking.domain.value_objects.partner_order_id import PartnerOrderId

__all__ = [
    "Money",
    "PartnerOrderId",
]
