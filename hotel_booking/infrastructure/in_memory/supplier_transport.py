import itertools
from collections import defaultdict, deque
from typing import Any, Callable

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.interfaces.supplier_transport import (
    SupplierResponse,
    SupplierTransport,
)
from hotel_booking.domain import constants
from hotel_booking.domain.constants import (
    ERROR_DOUBLE_BOOKING_FORM,
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_PROCESSING,
    TRANSPORT_NETWORK_ERROR,
)


class LostResponse:
    """El proveedor procesa la llamada pero la respuesta se pierde en la red."""


ScriptedItem = SupplierResponse | dict | Exception | LostResponse


class StubSupplierTransport(SupplierTransport):
    """
    Proveedor en memoria: camino feliz por defecto.

    Idempotente por partner_order_id como el proveedor real: un segundo
    OrderForm con el mismo id devuelve double_booking_form, y la consulta
    batch encuentra la orden creada. Cada endpoint acepta respuestas
    programadas (`script`) que se consumen en orden antes del comportamiento
    por defecto.
    """

    def __init__(self, price_amount: str = "199.00", currency: str = "USD") -> None:
        self.price_amount = price_amount
        self.currency = currency
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._scripts: dict[str, deque[ScriptedItem]] = defaultdict(deque)
        self._order_ids = itertools.count(9001)
        self.orders: dict[str, dict[str, Any]] = {}
        self.orders_by_partner_id: dict[str, list[str]] = defaultdict(list)
        self._handlers: dict[str, Callable[[dict[str, Any]], SupplierResponse]] = {
            constants.ENDPOINT_PREBOOK: self._prebook,
            constants.ENDPOINT_PREBOOK_MULTIROOM: self._prebook_multiroom,
            constants.ENDPOINT_ORDER_FORM: self._order_form,
            constants.ENDPOINT_ORDER_FORM_MULTIROOM: self._order_form_multiroom,
            constants.ENDPOINT_ORDER_FINISH: self._order_finish,
            constants.ENDPOINT_ORDER_FINISH_MULTIROOM: self._order_finish_multiroom,
            constants.ENDPOINT_ORDER_STATUS: self._order_status,
            constants.ENDPOINT_ORDER_INFO: self._order_info,
            constants.ENDPOINT_ORDERS_BATCH: self._orders_batch,
            constants.ENDPOINT_ORDER_CANCEL: self._order_cancel,
        }

    def script(self, endpoint: str, *items: ScriptedItem) -> None:
        self._scripts[endpoint].extend(items)

    def calls_to(self, endpoint: str) -> list[dict[str, Any]]:
        return [body for called, body in self.calls if called == endpoint]

    def reset(self) -> None:
        self.calls.clear()
        self._scripts.clear()
        self.orders.clear()
        self.orders_by_partner_id.clear()

    async def call(
        self,
        endpoint: str,
        body: dict[str, Any],
        context: RequestContext | None = None,
    ) -> SupplierResponse:
        payload = dict(body)
        if context is not None:
            payload["userId"] = context.user_id
        self.calls.append((endpoint, payload))

        queue = self._scripts.get(endpoint)
        if queue:
            item = queue.popleft()
            if isinstance(item, Exception):
                raise item
            if isinstance(item, SupplierResponse):
                return item
            if isinstance(item, dict):
                return SupplierResponse.success(item)
            if isinstance(item, LostResponse):
                self._dispatch(endpoint, payload)
                return SupplierResponse.failure(
                    TRANSPORT_NETWORK_ERROR, "Network error: connection reset"
                )

        return self._dispatch(endpoint, payload)

    def _dispatch(self, endpoint: str, body: dict[str, Any]) -> SupplierResponse:
        handler = self._handlers.get(endpoint)
        if handler is None:
            return SupplierResponse.success({"endpoint": endpoint})
        return handler(body)

    # === Pasos del flujo ===

    def _price(self) -> dict[str, str]:
        return {"amount": self.price_amount, "currency_code": self.currency}

    def _prebook(self, body: dict[str, Any]) -> SupplierResponse:
        source = body.get("book_hash") or body.get("match_hash") or ""
        return SupplierResponse.success(
            {
                "booking_hash": f"p-{source}",
                "price_changed": False,
                "final_price": self._price(),
                "price_increase_percent": body.get("price_increase_percent"),
            }
        )

    def _prebook_multiroom(self, body: dict[str, Any]) -> SupplierResponse:
        rooms = [
            {
                "roomIndex": index,
                "booking_hash": f"p-{room.get('book_hash') or room.get('match_hash')}",
                "book_hash": f"p-{room.get('book_hash') or room.get('match_hash')}",
                "price_changed": False,
                "final_price": self._price(),
                "currency": self.currency,
            }
            for index, room in enumerate(body.get("rooms") or [])
        ]
        return SupplierResponse.success(
            {
                "rooms": rooms,
                "failed": [],
                "total_rooms": len(rooms),
                "successful_rooms": len(rooms),
                "failed_rooms": 0,
            }
        )

    def _create_order(self, partner_order_id: str, book_hash: str) -> dict[str, Any]:
        order_id = str(next(self._order_ids))
        order = {
            "order_id": order_id,
            "item_id": f"{order_id}-1",
            "partner_order_id": partner_order_id,
            "book_hash": book_hash,
            "status": ORDER_STATUS_PROCESSING,
            "payment_types": [{"type": "deposit", **self._price()}],
        }
        self.orders[order_id] = order
        self.orders_by_partner_id[partner_order_id].append(order_id)
        return order

    def _form_payload(self, order: dict[str, Any]) -> dict[str, Any]:
        return {
            "order_id": order["order_id"],
            "item_id": order["item_id"],
            "required_fields": [{"name": "first_name", "required": True, "type": "text"}],
            "rooms": [{"guests_required": 1, "is_lead_guest": True}],
            "payment_types_available": ["deposit"],
            "payment_types": order["payment_types"],
            "final_price": self._price(),
        }

    def _double_booking(self) -> SupplierResponse:
        return SupplierResponse.failure(
            ERROR_DOUBLE_BOOKING_FORM, "Order with this partner_order_id already exists"
        )

    def _order_form(self, body: dict[str, Any]) -> SupplierResponse:
        partner_order_id = body.get("partner_order_id") or ""
        if self.orders_by_partner_id.get(partner_order_id):
            return self._double_booking()
        order = self._create_order(partner_order_id, body.get("book_hash") or "")
        return SupplierResponse.success(self._form_payload(order))

    def _order_form_multiroom(self, body: dict[str, Any]) -> SupplierResponse:
        partner_order_id = body.get("partner_order_id") or ""
        if self.orders_by_partner_id.get(partner_order_id):
            return self._double_booking()
        rooms = []
        for index, room in enumerate(body.get("prebooked_rooms") or []):
            order = self._create_order(partner_order_id, room.get("book_hash") or "")
            rooms.append({"roomIndex": index, **self._form_payload(order)})
        return SupplierResponse.success(
            {
                "rooms": rooms,
                "failed": [],
                "total_rooms": len(rooms),
                "successful_rooms": len(rooms),
                "failed_rooms": 0,
                "payment_types_available": ["deposit"],
            }
        )

    def _order_finish(self, body: dict[str, Any]) -> SupplierResponse:
        order = self.orders.get(str(body.get("order_id")))
        if order is None:
            return SupplierResponse.failure("order_not_found", "Order not found", 404)
        return SupplierResponse.success(
            {"order_id": order["order_id"], "status": ORDER_STATUS_PROCESSING}
        )

    def _order_finish_multiroom(self, body: dict[str, Any]) -> SupplierResponse:
        rooms = []
        failed = []
        for index, room in enumerate(body.get("rooms") or []):
            order = self.orders.get(str(room.get("order_id")))
            if order is None:
                failed.append(
                    {"roomIndex": index, "error": "Order not found", "code": "order_not_found"}
                )
                continue
            rooms.append(
                {"roomIndex": index, "order_id": order["order_id"], "status": ORDER_STATUS_PROCESSING}
            )
        return SupplierResponse.success(
            {
                "rooms": rooms,
                "failed": failed,
                "partner_order_id": body.get("partner_order_id"),
                "order_ids": [room["order_id"] for room in rooms],
                "total_rooms": len(rooms) + len(failed),
                "successful_rooms": len(rooms),
                "failed_rooms": len(failed),
            }
        )

    def _order_status(self, body: dict[str, Any]) -> SupplierResponse:
        order = self.orders.get(str(body.get("order_id")))
        if order is None:
            return SupplierResponse.success(
                {"order_id": body.get("order_id"), "status": ORDER_STATUS_CONFIRMED}
            )
        if order["status"] == ORDER_STATUS_PROCESSING:
            order["status"] = ORDER_STATUS_CONFIRMED
        return SupplierResponse.success({"order_id": order["order_id"], "status": order["status"]})

    def _order_info(self, body: dict[str, Any]) -> SupplierResponse:
        order = self.orders.get(str(body.get("order_id")))
        if order is None:
            return SupplierResponse.failure("order_not_found", "Order not found", 404)
        return SupplierResponse.success(dict(order))

    def _orders_batch(self, body: dict[str, Any]) -> SupplierResponse:
        partner_ids = (body.get("search") or {}).get("partner_order_id") or []
        page_size = int((body.get("pagination") or {}).get("page_size") or 1)
        found = [
            self.orders[order_id]
            for partner_order_id in partner_ids
            for order_id in self.orders_by_partner_id.get(partner_order_id, [])
        ]
        # ordering desc por created_at
        found.reverse()
        return SupplierResponse.success(
            {
                "orders": [dict(order) for order in found[:page_size]],
                "total_orders": len(self.orders),
                "found_orders": len(found),
            }
        )

    def _order_cancel(self, body: dict[str, Any]) -> SupplierResponse:
        order = self.orders.get(str(body.get("order_id")))
        if order is None:
            return SupplierResponse.failure("order_not_found", "Order not found", 404)
        order["status"] = ORDER_STATUS_CANCELLED
        return SupplierResponse.success({"order_id": order["order_id"], "status": order["status"]})
