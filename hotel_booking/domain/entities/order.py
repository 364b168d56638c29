"""Estado de una orden del lado del proveedor."""

from dataclasses import dataclass, field
from typing import Any

from hotel_booking.domain.constants import TERMINAL_ORDER_STATUSES


def is_terminal_status(status: str | None) -> bool:
    """confirmed / failed / cancelled; cualquier otro valor (o None) sigue en curso."""
    return status in TERMINAL_ORDER_STATUSES


@dataclass
class OrderStatusSnapshot:
    """Resultado de una consulta de OrderStatus."""

    order_id: str
    status: str | None
    error_code: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return is_terminal_status(self.status)
