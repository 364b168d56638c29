import logging
from typing import Any

from hotel_booking.application.dtos.booking_dto import (
    MultiroomOrderFormResult,
    OrderFormResult,
    RequestContext,
)
from hotel_booking.application.interfaces.clock import Clock
from hotel_booking.application.interfaces.order_form_lock import OrderFormLock
from hotel_booking.application.interfaces.supplier_transport import (
    SupplierTransport,
    build_supplier_error,
)
from hotel_booking.application.retry import (
    ORDER_FORM_BASE_DELAY_SECONDS,
    ORDER_FORM_MAX_ATTEMPTS,
    ORDER_FORM_MAX_DELAY_SECONDS,
    bounded_backoff_retry,
)
from hotel_booking.application.use_cases.recover_order import (
    OrderRecoveryResolver,
    extract_recovered_order,
)
from hotel_booking.domain.constants import ENDPOINT_ORDER_FORM, ENDPOINT_ORDER_FORM_MULTIROOM
from hotel_booking.domain.entities.multiroom import FailedRoom, MultiroomBatch
from hotel_booking.domain.errors import (
    BookingSessionExpiredError,
    BookingValidationError,
    SupplierError,
)
from hotel_booking.domain.value_objects.money import Money

INVALID_ORDER_FORM = "invalid_order_form"
NOT_RECOVERED = "not_recovered"


class OrderFormUseCase:
    """
    Paso 3: OrderForm - crea la orden y devuelve los campos requeridos.

    Política de reintentos:
    - códigos terminales (rate_not_found, contract_mismatch, ...): falla inmediata
    - timeout / unknown y fallas de transporte: backoff exponencial, 10 intentos
    - double_booking_form: la orden ya existe, se recupera vía Recovery Resolver
    """

    def __init__(
        self,
        transport: SupplierTransport,
        recovery_resolver: OrderRecoveryResolver,
        clock: Clock,
        order_form_lock: OrderFormLock | None = None,
        max_attempts: int = ORDER_FORM_MAX_ATTEMPTS,
        base_delay_seconds: float = ORDER_FORM_BASE_DELAY_SECONDS,
        max_delay_seconds: float = ORDER_FORM_MAX_DELAY_SECONDS,
    ) -> None:
        self._transport = transport
        self._recovery_resolver = recovery_resolver
        self._clock = clock
        self._order_form_lock = order_form_lock
        self._max_attempts = max_attempts
        self._base_delay_seconds = base_delay_seconds
        self._max_delay_seconds = max_delay_seconds
        self._logger = logging.getLogger(__name__)

    async def execute(
        self, book_hash: str, partner_order_id: str, context: RequestContext
    ) -> OrderFormResult:
        if not book_hash:
            raise BookingValidationError("book_hash")
        if not partner_order_id:
            raise BookingValidationError("partner_order_id")

        async def _run() -> OrderFormResult:
            return await self._execute_single(book_hash, partner_order_id, context)

        if self._order_form_lock is None:
            return await _run()
        return await self._order_form_lock.run(partner_order_id, _run)

    async def execute_multiroom(
        self, book_hashes: list[str], partner_order_id: str, context: RequestContext
    ) -> MultiroomOrderFormResult:
        if not book_hashes or not all(book_hashes):
            raise BookingValidationError("book_hashes", "Every room requires a book_hash")
        if not partner_order_id:
            raise BookingValidationError("partner_order_id")

        async def _run() -> MultiroomOrderFormResult:
            return await self._execute_multiroom(book_hashes, partner_order_id, context)

        if self._order_form_lock is None:
            return await _run()
        return await self._order_form_lock.run(partner_order_id, _run)

    async def _execute_single(
        self, book_hash: str, partner_order_id: str, context: RequestContext
    ) -> OrderFormResult:
        body = {
            "book_hash": book_hash,
            "partner_order_id": partner_order_id,
            "language": context.language,
            "user_ip": context.user_ip,
        }

        async def _attempt(attempt: int) -> OrderFormResult:
            self._logger.info(
                "Order form attempt",
                extra={
                    "partner_order_id": partner_order_id,
                    "attempt": attempt,
                    "max_attempts": self._max_attempts,
                },
            )
            response = await self._transport.call(ENDPOINT_ORDER_FORM, body, context)
            data = response.raise_for_error()
            return build_order_form_result(data, partner_order_id)

        async def _recover(_: BaseException) -> OrderFormResult:
            return await self._recover_single(partner_order_id, context)

        result = await bounded_backoff_retry(
            _attempt,
            clock=self._clock,
            on_duplicate=_recover,
            max_attempts=self._max_attempts,
            base_delay=self._base_delay_seconds,
            max_delay=self._max_delay_seconds,
        )
        self._logger.info(
            "Order form success",
            extra={
                "partner_order_id": partner_order_id,
                "order_id": result.order_id,
                "recovered": result.recovered,
            },
        )
        return result

    async def _recover_single(
        self, partner_order_id: str, context: RequestContext
    ) -> OrderFormResult:
        recovered = await self._recovery_resolver.recover(partner_order_id, context)
        if recovered is None:
            raise BookingSessionExpiredError(partner_order_id)

        # placeholder: campos y precio desconocidos
        return OrderFormResult(
            order_id=recovered.order_id,
            item_id=recovered.item_id,
            partner_order_id=partner_order_id,
            payment_types=recovered.payment_types,
            payment_types_available=_type_names(recovered.payment_types),
            final_price=Money.zero(),
            recovered=True,
        )

    async def _execute_multiroom(
        self, book_hashes: list[str], partner_order_id: str, context: RequestContext
    ) -> MultiroomOrderFormResult:
        body = {
            # compatibilidad con el backend: hash de la primera habitación
            "book_hash": book_hashes[0],
            "prebooked_rooms": [{"book_hash": book_hash} for book_hash in book_hashes],
            "partner_order_id": partner_order_id,
            "language": context.language,
            "user_ip": context.user_ip,
        }

        async def _attempt(attempt: int) -> MultiroomOrderFormResult:
            self._logger.info(
                "Multiroom order form attempt",
                extra={
                    "partner_order_id": partner_order_id,
                    "attempt": attempt,
                    "rooms": len(book_hashes),
                },
            )
            response = await self._transport.call(ENDPOINT_ORDER_FORM_MULTIROOM, body, context)
            data = response.raise_for_error()
            batch = MultiroomBatch.from_payload(data)

            if batch.all_failed or not batch.rooms:
                first = batch.failed[0] if batch.failed else None
                if first is None:
                    raise SupplierError(
                        code=INVALID_ORDER_FORM, message="Multiroom order form returned no rooms"
                    )
                raise build_supplier_error(first.code, first.error or first.code)

            forms = [
                build_order_form_result(
                    room,
                    partner_order_id,
                    room_index=int(room.get("roomIndex", room.get("room_index", position))),
                    shared_payment_types=data.get("payment_types_available"),
                )
                for position, room in enumerate(batch.rooms)
            ]
            return MultiroomOrderFormResult(
                partner_order_id=partner_order_id, batch=batch, forms=forms
            )

        async def _recover(_: BaseException) -> MultiroomOrderFormResult:
            return await self._recover_multiroom(book_hashes, partner_order_id, context)

        result = await bounded_backoff_retry(
            _attempt,
            clock=self._clock,
            on_duplicate=_recover,
            max_attempts=self._max_attempts,
            base_delay=self._base_delay_seconds,
            max_delay=self._max_delay_seconds,
            step="order_form_multiroom",
        )
        self._logger.info(
            "Multiroom order form success",
            extra={
                "partner_order_id": partner_order_id,
                "successful_rooms": result.batch.successful_rooms,
                "failed_rooms": result.batch.failed_rooms,
                "recovered": result.recovered,
            },
        )
        return result

    async def _recover_multiroom(
        self, book_hashes: list[str], partner_order_id: str, context: RequestContext
    ) -> MultiroomOrderFormResult:
        orders = await self._recovery_resolver.find_orders(
            partner_order_id, context, page_size=len(book_hashes)
        )
        recovered = [order for order in map(extract_recovered_order, orders) if order]
        if not recovered:
            raise BookingSessionExpiredError(partner_order_id)

        # el batch viene ordenado por created_at desc; las habitaciones se crean en orden
        recovered.reverse()
        forms = [
            OrderFormResult(
                order_id=order.order_id,
                item_id=order.item_id,
                partner_order_id=partner_order_id,
                payment_types=order.payment_types,
                payment_types_available=_type_names(order.payment_types),
                final_price=Money.zero(),
                recovered=True,
                room_index=index,
            )
            for index, order in enumerate(recovered[: len(book_hashes)])
        ]
        failed = [
            FailedRoom(
                room_index=index,
                error="Order could not be recovered",
                code=NOT_RECOVERED,
                book_hash=book_hashes[index],
            )
            for index in range(len(forms), len(book_hashes))
        ]
        batch = MultiroomBatch(
            rooms=[form.to_payload() for form in forms],
            failed=failed,
            total_rooms=len(book_hashes),
            successful_rooms=len(forms),
            failed_rooms=len(failed),
        )
        self._logger.info(
            "Recovered existing multiroom orders",
            extra={"partner_order_id": partner_order_id, "recovered_rooms": len(forms)},
        )
        return MultiroomOrderFormResult(
            partner_order_id=partner_order_id, batch=batch, forms=forms, recovered=True
        )


def build_order_form_result(
    data: dict[str, Any],
    partner_order_id: str,
    room_index: int = 0,
    shared_payment_types: list[str] | None = None,
) -> OrderFormResult:
    """Convierte la respuesta de OrderForm (o una habitación multiroom) en OrderFormResult."""
    order_id = data.get("order_id")
    item_id = data.get("item_id")
    if order_id in (None, "") or item_id in (None, ""):
        raise SupplierError(
            code=INVALID_ORDER_FORM,
            message="Order form response is missing order_id or item_id",
        )

    payment_types = _payment_type_details(data)
    available = data.get("payment_types_available") or shared_payment_types
    if not available:
        available = _type_names(payment_types)

    return OrderFormResult(
        order_id=str(order_id),
        item_id=str(item_id),
        partner_order_id=partner_order_id,
        required_fields=list(data.get("required_fields") or data.get("form_fields") or []),
        rooms=list(data.get("rooms") or []),
        payment_types=payment_types,
        payment_types_available=[str(name) for name in available],
        final_price=Money.from_payload(data.get("final_price")) or Money.zero(),
        room_index=room_index,
        raw=data,
    )


def _payment_type_details(data: dict[str, Any]) -> list[dict[str, Any]]:
    detail = data.get("payment_types_detail")
    if isinstance(detail, list) and detail:
        return [item for item in detail if isinstance(item, dict)]

    payment_types = data.get("payment_types")
    if not isinstance(payment_types, list):
        return []
    return [
        item if isinstance(item, dict) else {"type": str(item)}
        for item in payment_types
        if item
    ]


def _type_names(payment_types: list[dict[str, Any]]) -> list[str]:
    return [str(item["type"]) for item in payment_types if item.get("type")]
