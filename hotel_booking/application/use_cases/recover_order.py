"""
Recovery Resolver: localiza una orden ya creada a partir de su PartnerOrderId.

El proveedor devuelve `item_id` y `payment_types` en ubicaciones distintas
según el estado de la orden. Cada ubicación posible es una estrategia de
extracción; se prueban en orden fijo y gana la primera que devuelve valor.
"""

import logging
from typing import Any, Callable

from hotel_booking.application.dtos.booking_dto import RecoveredOrder, RequestContext
from hotel_booking.application.interfaces.supplier_transport import SupplierTransport
from hotel_booking.domain.constants import ENDPOINT_ORDERS_BATCH

logger = logging.getLogger(__name__)

Extractor = Callable[[dict[str, Any]], Any]


def _top_level_item_id(order: dict[str, Any]) -> str | None:
    return _as_id(order.get("item_id"))


def _first_room_item_id(field_name: str) -> Extractor:
    def extract(order: dict[str, Any]) -> str | None:
        rooms = order.get(field_name)
        if isinstance(rooms, list) and rooms and isinstance(rooms[0], dict):
            return _as_id(rooms[0].get("item_id"))
        return None

    return extract


def _payment_types_array(order: dict[str, Any]) -> list[dict[str, Any]] | None:
    payment_types = order.get("payment_types")
    if not isinstance(payment_types, list) or not payment_types:
        return None
    normalized = []
    for payment_type in payment_types:
        if isinstance(payment_type, dict):
            normalized.append(payment_type)
        elif isinstance(payment_type, str) and payment_type:
            normalized.append({"type": payment_type})
    return normalized or None


def _payment_data_type(order: dict[str, Any]) -> list[dict[str, Any]] | None:
    payment_data = order.get("payment_data")
    if isinstance(payment_data, dict) and payment_data.get("payment_type"):
        return [{"type": payment_data["payment_type"]}]
    return None


ITEM_ID_STRATEGIES: tuple[Extractor, ...] = (
    _top_level_item_id,
    _first_room_item_id("rooms_data"),
    _first_room_item_id("rooms"),
)

PAYMENT_TYPES_STRATEGIES: tuple[Extractor, ...] = (
    _payment_types_array,
    _payment_data_type,
)


def _first_match(strategies: tuple[Extractor, ...], order: dict[str, Any]) -> Any:
    for strategy in strategies:
        value = strategy(order)
        if value:
            return value
    return None


def _as_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def extract_recovered_order(order: dict[str, Any]) -> RecoveredOrder | None:
    """Aplica las estrategias sobre una orden del batch; None si falta order_id o item_id."""
    order_id = _as_id(order.get("order_id"))
    item_id = _first_match(ITEM_ID_STRATEGIES, order)
    if not order_id or not item_id:
        return None
    return RecoveredOrder(
        order_id=order_id,
        item_id=item_id,
        payment_types=_first_match(PAYMENT_TYPES_STRATEGIES, order) or [],
        status=order.get("status"),
    )


class OrderRecoveryResolver:
    def __init__(self, transport: SupplierTransport) -> None:
        self._transport = transport

    async def recover(
        self, partner_order_id: str, context: RequestContext
    ) -> RecoveredOrder | None:
        orders = await self.find_orders(partner_order_id, context, page_size=1)
        if not orders:
            logger.warning(
                "No existing order found for partner order id",
                extra={"partner_order_id": partner_order_id},
            )
            return None

        recovered = extract_recovered_order(orders[0])
        if recovered is None:
            logger.warning(
                "Existing order found but item_id could not be extracted",
                extra={"partner_order_id": partner_order_id},
            )
            return None

        logger.info(
            "Recovered existing order",
            extra={
                "partner_order_id": partner_order_id,
                "order_id": recovered.order_id,
                "item_id": recovered.item_id,
            },
        )
        return recovered

    async def find_orders(
        self, partner_order_id: str, context: RequestContext, page_size: int = 1
    ) -> list[dict[str, Any]]:
        body = {
            "search": {"partner_order_id": [partner_order_id]},
            "pagination": {"page_size": str(page_size), "page_number": "1"},
            "ordering": {"ordering_type": "desc", "ordering_by": "created_at"},
            "language": context.language,
        }
        response = await self._transport.call(ENDPOINT_ORDERS_BATCH, body, context)
        data = response.raise_for_error()
        orders = data.get("orders")
        if not isinstance(orders, list):
            return []
        return [order for order in orders if isinstance(order, dict)]
