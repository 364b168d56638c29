from fastapi import APIRouter, Body, Depends, status

from hotel_booking.api.dependencies import get_request_context, get_use_cases
from hotel_booking.api.schemas.bookings import (
    CancelRequest,
    FailedRoomSchema,
    MultiroomFinishRequest,
    MultiroomFinishResponse,
    MultiroomOrderFormRequest,
    MultiroomOrderFormResponse,
    MultiroomPollRequest,
    MultiroomPollResponse,
    MultiroomPrebookRequest,
    MultiroomPrebookResponse,
    OrderFinishRequest,
    OrderFinishResponse,
    OrderFormRequest,
    OrderFormResponse,
    OrderStatusResponse,
    PartnerOrderIdResponse,
    PollRequest,
    PrebookedRoomResponse,
    PrebookRequest,
    PrebookResponse,
    PriceSchema,
)
from hotel_booking.application import dtos
from hotel_booking.application.dtos.booking_dto import OrderFormResult, RequestContext
from hotel_booking.application.error_classifier import user_message_for
from hotel_booking.domain.entities.booked_rate import BookedRate
from hotel_booking.domain.entities.guest import Guest, RoomOccupancy
from hotel_booking.domain.entities.multiroom import MultiroomBatch
from hotel_booking.domain.entities.order import OrderStatusSnapshot
from hotel_booking.domain.value_objects.money import Money

router = APIRouter()


def _price(money: Money | None) -> PriceSchema | None:
    return PriceSchema(**money.as_payload()) if money else None


def _failed(batch: MultiroomBatch) -> list[FailedRoomSchema]:
    return [
        FailedRoomSchema(
            room_index=room.room_index, error=room.error, code=room.code, book_hash=room.book_hash
        )
        for room in batch.failed
    ]


def _order_form_response(result: OrderFormResult) -> OrderFormResponse:
    return OrderFormResponse.model_validate(result.to_payload())


def _status_response(snapshot: OrderStatusSnapshot) -> OrderStatusResponse:
    return OrderStatusResponse(
        order_id=snapshot.order_id,
        status=snapshot.status,
        is_terminal=snapshot.is_terminal,
        error_code=snapshot.error_code,
        message=user_message_for(snapshot.error_code) if snapshot.error_code else None,
    )


def _guests(guests) -> list[Guest]:
    return [
        Guest(first_name=g.first_name, last_name=g.last_name, is_child=g.is_child, age=g.age)
        for g in guests
    ]


@router.post("/prebook", response_model=PrebookResponse, status_code=status.HTTP_200_OK)
async def prebook(
    payload: PrebookRequest,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> PrebookResponse:
    rate = BookedRate(
        book_hash=payload.book_hash,
        match_hash=payload.match_hash,
        residency=payload.residency,
        currency=payload.currency,
        price_increase_percent=payload.price_increase_percent,
    )
    result = await use_cases["prebook"].execute(rate, context)
    return PrebookResponse(
        book_hash=result.book_hash,
        price=_price(result.price),
        price_changed=result.price_changed,
        original_price=_price(result.original_price),
    )


@router.post(
    "/prebook/multiroom",
    response_model=MultiroomPrebookResponse,
    status_code=status.HTTP_200_OK,
)
async def prebook_multiroom(
    payload: MultiroomPrebookRequest,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> MultiroomPrebookResponse:
    rates = [
        BookedRate(
            book_hash=room.book_hash,
            match_hash=room.match_hash,
            residency=room.residency,
            currency=payload.currency,
            price_increase_percent=room.price_increase_percent,
            occupancy=tuple(
                RoomOccupancy(adults=item.adults, children=tuple(item.children))
                for item in room.guests
            ),
        )
        for room in payload.rooms
    ]
    result = await use_cases["prebook"].execute_multiroom(
        rates, context, currency=payload.currency
    )
    return MultiroomPrebookResponse(
        rooms=[
            PrebookedRoomResponse(
                room_index=room.room_index,
                book_hash=room.book_hash,
                original_hash=room.original_hash,
                price=_price(room.price),
                price_changed=room.price_changed,
            )
            for room in result.rooms
        ],
        failed=_failed(result.batch),
        total_rooms=result.batch.total_rooms,
        successful_rooms=result.batch.successful_rooms,
        failed_rooms=result.batch.failed_rooms,
    )


@router.post("/order-form", response_model=OrderFormResponse, status_code=status.HTTP_200_OK)
async def order_form(
    payload: OrderFormRequest,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> OrderFormResponse:
    partner_order_id = (
        payload.partner_order_id or use_cases["partner_order_id_generator"].generate().value
    )
    result = await use_cases["order_form"].execute(payload.book_hash, partner_order_id, context)
    return _order_form_response(result)


@router.post(
    "/order-form/multiroom",
    response_model=MultiroomOrderFormResponse,
    status_code=status.HTTP_200_OK,
)
async def order_form_multiroom(
    payload: MultiroomOrderFormRequest,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> MultiroomOrderFormResponse:
    partner_order_id = (
        payload.partner_order_id or use_cases["partner_order_id_generator"].generate().value
    )
    result = await use_cases["order_form"].execute_multiroom(
        payload.book_hashes, partner_order_id, context
    )
    return MultiroomOrderFormResponse(
        partner_order_id=result.partner_order_id,
        rooms=[_order_form_response(form) for form in result.forms],
        failed=_failed(result.batch),
        total_rooms=result.batch.total_rooms,
        successful_rooms=result.batch.successful_rooms,
        failed_rooms=result.batch.failed_rooms,
        recovered=result.recovered,
    )


@router.post("/order-finish", response_model=OrderFinishResponse, status_code=status.HTTP_200_OK)
async def order_finish(
    payload: OrderFinishRequest,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> OrderFinishResponse:
    request = dtos.OrderFinishRequest(
        order_id=payload.order_id,
        item_id=payload.item_id,
        partner_order_id=payload.partner_order_id,
        email=payload.email,
        payment_type=payload.payment_type,
        payment_amount=payload.payment_amount,
        payment_currency_code=payload.payment_currency_code,
        guests=_guests(payload.guests),
        phone=payload.phone,
    )
    result = await use_cases["order_finish"].execute(request, context)
    return OrderFinishResponse(
        order_id=result.order_id, partner_order_id=result.partner_order_id, status=result.status
    )


@router.post(
    "/order-finish/multiroom",
    response_model=MultiroomFinishResponse,
    status_code=status.HTTP_200_OK,
)
async def order_finish_multiroom(
    payload: MultiroomFinishRequest,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> MultiroomFinishResponse:
    request = dtos.MultiroomFinishRequest(
        rooms=[
            dtos.MultiroomFinishRoom(
                order_id=room.order_id, item_id=room.item_id, guests=_guests(room.guests)
            )
            for room in payload.rooms
        ],
        partner_order_id=payload.partner_order_id,
        email=payload.email,
        payment_type=payload.payment_type,
        payment_amount=payload.payment_amount,
        payment_currency_code=payload.payment_currency_code,
        phone=payload.phone,
        upsell_data=payload.upsell_data,
    )
    result = await use_cases["order_finish"].execute_multiroom(request, context)
    return MultiroomFinishResponse(
        partner_order_id=result.partner_order_id,
        order_ids=result.order_ids,
        failed=_failed(result.batch),
        total_rooms=result.batch.total_rooms,
        successful_rooms=result.batch.successful_rooms,
        failed_rooms=result.batch.failed_rooms,
    )


@router.post(
    "/orders/poll",
    response_model=MultiroomPollResponse,
    status_code=status.HTTP_200_OK,
)
async def poll_orders(
    payload: MultiroomPollRequest,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> MultiroomPollResponse:
    statuses = await use_cases["status_poller"].poll_many(
        payload.order_ids,
        context,
        max_attempts=payload.max_attempts,
        interval_seconds=payload.interval_seconds,
    )
    pending = [order_id for order_id in dict.fromkeys(payload.order_ids) if order_id not in statuses]
    return MultiroomPollResponse(
        statuses={order_id: _status_response(snapshot) for order_id, snapshot in statuses.items()},
        pending_order_ids=pending,
        complete=not pending,
    )


@router.post(
    "/orders/{order_id}/poll",
    response_model=OrderStatusResponse,
    status_code=status.HTTP_200_OK,
)
async def poll_order(
    order_id: str,
    payload: PollRequest | None = Body(default=None),
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> OrderStatusResponse:
    payload = payload or PollRequest()
    snapshot = await use_cases["status_poller"].poll(
        order_id,
        context,
        max_attempts=payload.max_attempts,
        interval_seconds=payload.interval_seconds,
    )
    return _status_response(snapshot)


@router.get("/orders/{order_id}", status_code=status.HTTP_200_OK)
async def get_order(
    order_id: str,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> dict:
    return await use_cases["post_booking"].get_order_info(order_id, context)


@router.get(
    "/orders/{order_id}/status",
    response_model=OrderStatusResponse,
    status_code=status.HTTP_200_OK,
)
async def get_order_status(
    order_id: str,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> OrderStatusResponse:
    snapshot = await use_cases["order_status"].execute(order_id, context)
    return _status_response(snapshot)


@router.post("/orders/{order_id}/cancel", status_code=status.HTTP_200_OK)
async def cancel_order(
    order_id: str,
    payload: CancelRequest | None = Body(default=None),
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> dict:
    reason = payload.reason if payload else None
    return await use_cases["post_booking"].cancel(order_id, context, reason=reason)


@router.get("/orders/{order_id}/documents", status_code=status.HTTP_200_OK)
async def get_documents(
    order_id: str,
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> dict:
    return await use_cases["post_booking"].get_documents(order_id, context)


@router.get("/account/contract", status_code=status.HTTP_200_OK)
async def get_contract_data(
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> dict:
    return await use_cases["post_booking"].get_contract_data(context)


@router.get("/account/financial-info", status_code=status.HTTP_200_OK)
async def get_financial_info(
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> dict:
    return await use_cases["post_booking"].get_financial_info(context)


@router.get("/account/closing-documents", status_code=status.HTTP_200_OK)
async def get_closing_documents(
    context: RequestContext = Depends(get_request_context),
    use_cases=Depends(get_use_cases),
) -> dict:
    return await use_cases["post_booking"].get_closing_documents(context)


@router.post(
    "/partner-order-ids",
    response_model=PartnerOrderIdResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_partner_order_id(use_cases=Depends(get_use_cases)) -> PartnerOrderIdResponse:
    return PartnerOrderIdResponse(
        partner_order_id=use_cases["partner_order_id_generator"].generate().value
    )
