import logging
from typing import Any

from hotel_booking.application.dtos.booking_dto import (
    BookingOutcome,
    MultiroomBookingOutcome,
    MultiroomFinishRequest,
    MultiroomFinishRoom,
    OrderFinishRequest,
    OrderFormResult,
    PrebookedRoom,
    RequestContext,
)
from hotel_booking.application.interfaces.partner_order_id_generator import (
    PartnerOrderIdGenerator,
)
from hotel_booking.application.use_cases.order_finish import OrderFinishUseCase
from hotel_booking.application.use_cases.order_form import OrderFormUseCase
from hotel_booking.application.use_cases.poll_order_status import StatusCallback, StatusPoller
from hotel_booking.application.use_cases.prebook import PrebookUseCase
from hotel_booking.domain.entities.booked_rate import BookedRate
from hotel_booking.domain.entities.guest import Guest
from hotel_booking.domain.errors import BookingValidationError, StatusPollingTimeoutError
from hotel_booking.domain.value_objects.money import Money

DEFAULT_PAYMENT_TYPE = "deposit"


class CompleteBookingUseCase:
    """
    Orquesta el flujo completo: Prebook -> OrderForm -> OrderFinish -> Status.

    Cada paso empieza solo cuando el anterior terminó. Un timeout de polling
    se devuelve como estado desconocido, nunca como fallo.
    """

    def __init__(
        self,
        prebook: PrebookUseCase,
        order_form: OrderFormUseCase,
        order_finish: OrderFinishUseCase,
        status_poller: StatusPoller,
        partner_order_id_generator: PartnerOrderIdGenerator,
    ) -> None:
        self._prebook = prebook
        self._order_form = order_form
        self._order_finish = order_finish
        self._status_poller = status_poller
        self._partner_order_id_generator = partner_order_id_generator
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        rate: BookedRate,
        guests: list[Guest],
        email: str,
        context: RequestContext,
        partner_order_id: str | None = None,
        payment_type: str | None = None,
        phone: str | None = None,
        on_status: StatusCallback | None = None,
    ) -> BookingOutcome:
        if not guests:
            raise BookingValidationError("guests", "At least one guest is required")

        prebook = await self._prebook.execute(rate, context)

        partner_order_id = partner_order_id or self._partner_order_id_generator.generate().value
        form = await self._order_form.execute(prebook.book_hash, partner_order_id, context)

        selected_type, amount = select_payment(form, prebook.price, payment_type)
        finish = await self._order_finish.execute(
            OrderFinishRequest(
                order_id=form.order_id,
                item_id=form.item_id,
                partner_order_id=partner_order_id,
                email=email,
                payment_type=selected_type,
                payment_amount=f"{amount.amount:.2f}" if amount else "",
                payment_currency_code=amount.currency_code if amount else rate.currency,
                guests=guests,
                phone=phone,
            ),
            context,
        )

        outcome = BookingOutcome(
            partner_order_id=partner_order_id, prebook=prebook, order_form=form, finish=finish
        )
        try:
            outcome.status = await self._status_poller.poll(
                form.order_id, context, on_status=on_status
            )
        except StatusPollingTimeoutError as exc:
            self._logger.warning(
                "Booking status unknown after polling",
                extra={
                    "partner_order_id": partner_order_id,
                    "order_id": form.order_id,
                    "last_status": exc.last_status,
                },
            )
            outcome.status_unknown = True

        self._logger.info(
            "Booking flow finished",
            extra={
                "partner_order_id": partner_order_id,
                "order_id": form.order_id,
                "status": outcome.status.status if outcome.status else None,
                "status_unknown": outcome.status_unknown,
            },
        )
        return outcome

    async def execute_multiroom(
        self,
        rates: list[BookedRate],
        guests_per_room: list[list[Guest]],
        email: str,
        context: RequestContext,
        currency: str = "USD",
        partner_order_id: str | None = None,
        payment_type: str | None = None,
        phone: str | None = None,
        on_status: StatusCallback | None = None,
    ) -> MultiroomBookingOutcome:
        if len(guests_per_room) != len(rates):
            raise BookingValidationError(
                "guests", "Guest list count must match the number of rooms"
            )

        prebook = await self._prebook.execute_multiroom(rates, context, currency=currency)

        partner_order_id = partner_order_id or self._partner_order_id_generator.generate().value
        form = await self._order_form.execute_multiroom(
            prebook.book_hashes, partner_order_id, context
        )

        rooms = []
        total: Money | None = None
        selected_type = payment_type or DEFAULT_PAYMENT_TYPE
        for room_form in form.forms:
            room_price = _prebook_room_price(prebook.rooms, room_form.room_index)
            selected_type, amount = select_payment(room_form, room_price, payment_type)
            if amount is not None:
                try:
                    total = amount if total is None else total + amount
                except ValueError as exc:
                    raise BookingValidationError("payment_currency_code", str(exc)) from exc
            guests = (
                guests_per_room[room_form.room_index]
                if room_form.room_index < len(guests_per_room)
                else []
            )
            rooms.append(
                MultiroomFinishRoom(
                    order_id=room_form.order_id, item_id=room_form.item_id, guests=guests
                )
            )
        if total is None:
            total = Money.zero(currency)

        finish = await self._order_finish.execute_multiroom(
            MultiroomFinishRequest(
                rooms=rooms,
                partner_order_id=partner_order_id,
                email=email,
                payment_type=selected_type,
                payment_amount=f"{total.amount:.2f}",
                payment_currency_code=total.currency_code,
                phone=phone,
            ),
            context,
        )

        statuses = await self._status_poller.poll_many(
            finish.order_ids, context, on_status=on_status
        )
        pending = [order_id for order_id in finish.order_ids if order_id not in statuses]

        self._logger.info(
            "Multiroom booking flow finished",
            extra={
                "partner_order_id": partner_order_id,
                "resolved_orders": len(statuses),
                "pending_order_ids": pending,
            },
        )
        return MultiroomBookingOutcome(
            partner_order_id=partner_order_id,
            prebook=prebook,
            order_form=form,
            finish=finish,
            statuses=statuses,
            pending_order_ids=pending,
        )


def select_payment(
    form: OrderFormResult, fallback_price: Money | None, requested_type: str | None = None
) -> tuple[str, Money | None]:
    """
    Elige tipo de pago y monto.

    Prioridad del tipo: el solicitado, el recomendado por el backend, el
    primero disponible. El monto sale del detalle del tipo elegido; si no
    existe, de final_price, y si es cero (resultado recuperado), del precio
    confirmado en Prebook.
    """
    details = form.payment_types
    detail: dict[str, Any] | None = None

    if requested_type:
        detail = next((item for item in details if item.get("type") == requested_type), None)
    if detail is None:
        recommended = form.raw.get("recommended_payment_type")
        if isinstance(recommended, dict) and recommended.get("type"):
            if requested_type is None or recommended.get("type") == requested_type:
                detail = recommended
    if detail is None and details and requested_type is None:
        detail = details[0]

    selected_type = (detail or {}).get("type") or requested_type
    if not selected_type:
        selected_type = (
            form.payment_types_available[0] if form.payment_types_available else DEFAULT_PAYMENT_TYPE
        )

    amount = Money.from_payload(detail) if detail else None
    if amount is None and not form.final_price.is_zero():
        amount = form.final_price
    if amount is None:
        amount = fallback_price
    return str(selected_type), amount


def _prebook_room_price(rooms: list[PrebookedRoom], room_index: int) -> Money | None:
    for room in rooms:
        if room.room_index == room_index:
            return room.price
    return None
