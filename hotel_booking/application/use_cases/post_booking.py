"""
Operaciones post-reserva: información, cancelación, documentos y consultas
financieras/contractuales.

Son llamadas simples de request/response, sin reintentos. Las órdenes demo
(`demo-...` / `DEMO-...`) responden localmente sin tocar la red.
"""

import logging
from typing import Any

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.interfaces.clock import Clock
from hotel_booking.application.interfaces.supplier_transport import SupplierTransport
from hotel_booking.domain.constants import (
    DEMO_ORDER_PREFIXES,
    ENDPOINT_CLOSING_DOCUMENTS,
    ENDPOINT_CONTRACT_DATA,
    ENDPOINT_FINANCIAL_INFO,
    ENDPOINT_INVOICE_DOWNLOAD,
    ENDPOINT_ORDER_CANCEL,
    ENDPOINT_ORDER_DOCUMENTS,
    ENDPOINT_ORDER_INFO,
    ENDPOINT_VOUCHER_DOWNLOAD,
    ORDER_STATUS_CANCELLED,
)
from hotel_booking.domain.errors import BookingValidationError

logger = logging.getLogger(__name__)


def is_demo_order(order_id: str) -> bool:
    return order_id.startswith(DEMO_ORDER_PREFIXES)


class PostBookingUseCase:
    def __init__(self, transport: SupplierTransport, clock: Clock) -> None:
        self._transport = transport
        self._clock = clock

    async def get_order_info(self, order_id: str, context: RequestContext) -> dict[str, Any]:
        _require_order_id(order_id)
        return await self._call(ENDPOINT_ORDER_INFO, {"order_id": order_id}, context)

    async def cancel(
        self, order_id: str, context: RequestContext, reason: str | None = None
    ) -> dict[str, Any]:
        _require_order_id(order_id)
        if is_demo_order(order_id):
            logger.info("Demo order cancelled locally", extra={"order_id": order_id})
            return {
                "order_id": order_id,
                "status": ORDER_STATUS_CANCELLED,
                "cancelled_at": self._clock.now().isoformat(),
                "demo": True,
            }

        body: dict[str, Any] = {"order_id": order_id, "language": context.language}
        if reason:
            body["reason"] = reason
        data = await self._call(ENDPOINT_ORDER_CANCEL, body, context)
        logger.info("Order cancelled", extra={"order_id": order_id})
        return data

    async def get_documents(self, order_id: str, context: RequestContext) -> dict[str, Any]:
        _require_order_id(order_id)
        if is_demo_order(order_id):
            return {"order_id": order_id, "documents": [], "demo": True}
        return await self._call(ENDPOINT_ORDER_DOCUMENTS, {"order_id": order_id}, context)

    async def download_voucher(
        self, order_id: str, partner_order_id: str, context: RequestContext
    ) -> dict[str, Any]:
        _require_order_id(order_id)
        if is_demo_order(order_id):
            return {"order_id": order_id, "document_type": "voucher", "url": None, "demo": True}
        if not partner_order_id:
            raise BookingValidationError("partner_order_id")
        body = {
            "order_id": order_id,
            "partner_order_id": partner_order_id,
            "language": context.language,
        }
        return await self._call(ENDPOINT_VOUCHER_DOWNLOAD, body, context)

    async def download_invoice(self, order_id: str, context: RequestContext) -> dict[str, Any]:
        _require_order_id(order_id)
        if is_demo_order(order_id):
            return {"order_id": order_id, "document_type": "invoice", "url": None, "demo": True}
        return await self._call(ENDPOINT_INVOICE_DOWNLOAD, {"order_id": order_id}, context)

    async def get_contract_data(self, context: RequestContext) -> dict[str, Any]:
        return await self._call(ENDPOINT_CONTRACT_DATA, {}, context)

    async def get_financial_info(self, context: RequestContext) -> dict[str, Any]:
        return await self._call(ENDPOINT_FINANCIAL_INFO, {}, context)

    async def get_closing_documents(self, context: RequestContext) -> dict[str, Any]:
        return await self._call(ENDPOINT_CLOSING_DOCUMENTS, {}, context)

    async def _call(
        self, endpoint: str, body: dict[str, Any], context: RequestContext
    ) -> dict[str, Any]:
        response = await self._transport.call(endpoint, body, context)
        return response.raise_for_error()


def _require_order_id(order_id: str) -> None:
    if not order_id:
        raise BookingValidationError("order_id")
