import logging

from hotel_booking.application.dtos.booking_dto import (
    MultiroomFinishRequest,
    MultiroomFinishResult,
    OrderFinishRequest,
    OrderFinishResult,
    RequestContext,
)
from hotel_booking.application.interfaces.supplier_transport import SupplierTransport
from hotel_booking.domain.constants import ENDPOINT_ORDER_FINISH, ENDPOINT_ORDER_FINISH_MULTIROOM
from hotel_booking.domain.entities.multiroom import MultiroomBatch
from hotel_booking.domain.errors import BookingValidationError, SupplierError


class OrderFinishUseCase:
    """
    Paso 4: OrderFinish - envía huéspedes y pago, inicia el procesamiento.

    Nunca se reintenta: una vez aceptado, el proveedor procesa la orden de
    forma asíncrona y repetir la llamada puede generar un doble cobro.
    """

    def __init__(self, transport: SupplierTransport) -> None:
        self._transport = transport
        self._logger = logging.getLogger(__name__)

    async def execute(
        self, request: OrderFinishRequest, context: RequestContext
    ) -> OrderFinishResult:
        _require(
            order_id=request.order_id,
            item_id=request.item_id,
            partner_order_id=request.partner_order_id,
            email=request.email,
        )

        body = {
            "order_id": request.order_id,
            "item_id": request.item_id,
            "partner_order_id": request.partner_order_id,
            "payment_type": request.payment_type,
            "payment_amount": request.payment_amount,
            "payment_currency_code": request.payment_currency_code,
            # el proveedor exige el envoltorio por habitación aun con una sola
            "guests": [{"guests": [guest.to_payload() for guest in request.guests]}],
            "email": request.email,
            "phone": request.phone,
            "user_ip": context.user_ip,
            "language": context.language,
        }

        response = await self._transport.call(ENDPOINT_ORDER_FINISH, body, context)
        data = response.raise_for_error()

        self._logger.info(
            "Order finish accepted",
            extra={
                "partner_order_id": request.partner_order_id,
                "order_id": request.order_id,
                "payment_type": request.payment_type,
            },
        )
        return OrderFinishResult(
            order_id=str(data.get("order_id") or request.order_id),
            partner_order_id=request.partner_order_id,
            status=data.get("status"),
            raw=data,
        )

    async def execute_multiroom(
        self, request: MultiroomFinishRequest, context: RequestContext
    ) -> MultiroomFinishResult:
        if not request.rooms:
            raise BookingValidationError("rooms", "At least one room is required")
        _require(partner_order_id=request.partner_order_id, email=request.email)
        for index, room in enumerate(request.rooms):
            if not room.order_id:
                raise BookingValidationError(
                    "order_id", f"Missing required field: order_id (room {index + 1})"
                )
            if not room.item_id:
                raise BookingValidationError(
                    "item_id", f"Missing required field: item_id (room {index + 1})"
                )

        body = {
            "rooms": [
                {
                    "order_id": room.order_id,
                    "item_id": room.item_id,
                    "guests": [guest.to_payload() for guest in room.guests],
                }
                for room in request.rooms
            ],
            "payment_type": request.payment_type,
            "payment_amount": request.payment_amount,
            "payment_currency_code": request.payment_currency_code,
            "email": request.email,
            "phone": request.phone,
            "partner_order_id": request.partner_order_id,
            "language": context.language,
            "upsell_data": request.upsell_data,
        }

        response = await self._transport.call(ENDPOINT_ORDER_FINISH_MULTIROOM, body, context)
        data = response.raise_for_error()
        batch = MultiroomBatch.from_payload(data)

        if batch.all_failed:
            first = batch.failed[0] if batch.failed else None
            raise SupplierError(
                code=first.code if first else "unknown",
                message=first.error if first and first.error else "All rooms failed to finish",
            )

        order_ids = [str(order_id) for order_id in data.get("order_ids") or []]
        if not order_ids:
            order_ids = [str(room["order_id"]) for room in batch.rooms if room.get("order_id")]

        self._logger.info(
            "Multiroom order finish accepted",
            extra={
                "partner_order_id": request.partner_order_id,
                "order_ids": order_ids,
                "failed_rooms": batch.failed_rooms,
            },
        )
        return MultiroomFinishResult(
            partner_order_id=request.partner_order_id, batch=batch, order_ids=order_ids
        )


def _require(**fields: str | None) -> None:
    for name, value in fields.items():
        if not value or not str(value).strip():
            raise BookingValidationError(name)
