"""Entidades del dominio de reservas."""

from hotel_booking.domain.entities.booked_rate import BookedRate
from hotel_booking.domain.entities.guest import Guest, RoomOccupancy
from hotel_booking.domain.entities.multiroom import FailedRoom, MultiroomBatch
from hotel_booking.domain.entities.order import (
    OrderStatusSnapshot,
    is_terminal_status,
)

__all__ = [
    "BookedRate",
    "Guest",
    "RoomOccupancy",
    "FailedRoom",
    "MultiroomBatch",
    "OrderStatusSnapshot",
    "is_terminal_status",
]
