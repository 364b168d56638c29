import logging

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.interfaces.supplier_transport import (
    SupplierTransport,
    build_supplier_error,
)
from hotel_booking.domain.constants import (
    ENDPOINT_ORDER_STATUS,
    FINAL_BOOKING_FAILURE_ERRORS,
    ORDER_STATUS_FAILED,
    RETRYABLE_ERRORS,
)
from hotel_booking.domain.entities.order import OrderStatusSnapshot
from hotel_booking.domain.errors import BookingValidationError


class GetOrderStatusUseCase:
    """
    Paso 5: consulta única de OrderStatus.

    - error final (3ds, soldout, charge, ...): estado terminal "failed"
    - timeout / unknown: estado None, la orden sigue en proceso
    - cualquier otro error se propaga
    """

    def __init__(self, transport: SupplierTransport) -> None:
        self._transport = transport
        self._logger = logging.getLogger(__name__)

    async def execute(self, order_id: str, context: RequestContext) -> OrderStatusSnapshot:
        if not order_id:
            raise BookingValidationError("order_id")

        response = await self._transport.call(
            ENDPOINT_ORDER_STATUS, {"order_id": order_id}, context
        )

        if response.error is not None:
            code = response.error.code
            if code in FINAL_BOOKING_FAILURE_ERRORS:
                self._logger.error(
                    "Order reported final booking failure",
                    extra={"order_id": order_id, "error_code": code},
                )
                return OrderStatusSnapshot(
                    order_id=order_id,
                    status=ORDER_STATUS_FAILED,
                    error_code=code,
                    payload=response.raw,
                )
            if code in RETRYABLE_ERRORS:
                return OrderStatusSnapshot(
                    order_id=order_id, status=None, error_code=code, payload=response.raw
                )
            raise build_supplier_error(code, response.error.message, response.http_status)

        data = response.data or {}
        status = data.get("status")
        return OrderStatusSnapshot(
            order_id=order_id,
            status=str(status) if status else None,
            error_code=data.get("error_code"),
            payload=data,
        )

