import pytest

from hotel_booking.application.dtos.booking_dto import (
    MultiroomFinishRequest,
    MultiroomFinishRoom,
    OrderFinishRequest,
)
from hotel_booking.application.interfaces.supplier_transport import SupplierResponse
from hotel_booking.application.use_cases.order_finish import OrderFinishUseCase
from hotel_booking.domain.constants import (
    ENDPOINT_ORDER_FINISH,
    ENDPOINT_ORDER_FINISH_MULTIROOM,
    ENDPOINT_ORDER_FORM,
    ENDPOINT_ORDER_FORM_MULTIROOM,
)
from hotel_booking.domain.entities.guest import Guest
from hotel_booking.domain.errors import (
    BookingValidationError,
    SupplierError,
    SupplierTransportError,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def order_finish(transport):
    return OrderFinishUseCase(transport=transport)


@pytest.fixture
def created_order(transport):
    # crea la orden 9001 en el proveedor fake
    transport._dispatch(ENDPOINT_ORDER_FORM, {"partner_order_id": "BK-1", "book_hash": "p-1"})
    return transport.orders["9001"]


def _request(**overrides) -> OrderFinishRequest:
    values = {
        "order_id": "9001",
        "item_id": "9001-1",
        "partner_order_id": "BK-1",
        "email": "a@b.com",
        "payment_type": "deposit",
        "payment_amount": "199.00",
        "payment_currency_code": "USD",
        "guests": [Guest(first_name="Ana", last_name="Lopez")],
    }
    values.update(overrides)
    return OrderFinishRequest(**values)


@pytest.mark.asyncio
async def test_finish_wraps_guests_per_room(order_finish, transport, context, created_order):
    result = await order_finish.execute(_request(), context)

    assert result.order_id == "9001"
    assert result.status == "processing"
    body = transport.calls_to(ENDPOINT_ORDER_FINISH)[0]
    assert body["guests"] == [
        {"guests": [{"first_name": "Ana", "last_name": "Lopez", "is_child": False}]}
    ]
    assert body["email"] == "a@b.com"
    assert body["payment_amount"] == "199.00"
    assert body["user_ip"] == "203.0.113.7"


@pytest.mark.parametrize("field_name", ["order_id", "item_id", "partner_order_id", "email"])
@pytest.mark.asyncio
async def test_missing_field_fails_without_network(order_finish, transport, context, field_name):
    with pytest.raises(BookingValidationError) as exc_info:
        await order_finish.execute(_request(**{field_name: ""}), context)

    assert exc_info.value.field == field_name
    assert exc_info.value.message == f"Missing required field: {field_name}"
    assert transport.calls == []


@pytest.mark.asyncio
async def test_finish_is_never_retried(order_finish, transport, clock, context):
    transport.script(
        ENDPOINT_ORDER_FINISH, SupplierResponse.failure("network_error", "Network error")
    )

    with pytest.raises(SupplierTransportError):
        await order_finish.execute(_request(), context)

    assert len(transport.calls_to(ENDPOINT_ORDER_FINISH)) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_multiroom_room_validation(order_finish, transport, context):
    request = MultiroomFinishRequest(
        rooms=[
            MultiroomFinishRoom(order_id="1", item_id="2"),
            MultiroomFinishRoom(order_id="", item_id="4"),
        ],
        partner_order_id="BK-1",
        email="a@b.com",
    )

    with pytest.raises(BookingValidationError) as exc_info:
        await order_finish.execute_multiroom(request, context)

    assert exc_info.value.message == "Missing required field: order_id (room 2)"
    assert transport.calls == []


@pytest.mark.asyncio
async def test_multiroom_finish_collects_order_ids(order_finish, transport, context):
    transport._dispatch(
        ENDPOINT_ORDER_FORM_MULTIROOM,
        {"partner_order_id": "BK-1", "prebooked_rooms": [{"book_hash": "p-1"}, {"book_hash": "p-2"}]},
    )
    request = MultiroomFinishRequest(
        rooms=[
            MultiroomFinishRoom(order_id="9001", item_id="9001-1", guests=[Guest("Ana", "Lopez")]),
            MultiroomFinishRoom(order_id="9002", item_id="9002-1", guests=[Guest("Luis", "Lopez")]),
        ],
        partner_order_id="BK-1",
        email="a@b.com",
        payment_amount="398.00",
    )

    result = await order_finish.execute_multiroom(request, context)

    assert result.order_ids == ["9001", "9002"]
    body = transport.calls_to(ENDPOINT_ORDER_FINISH_MULTIROOM)[0]
    assert body["rooms"][0]["guests"] == [
        {"first_name": "Ana", "last_name": "Lopez", "is_child": False}
    ]
    assert body["partner_order_id"] == "BK-1"
    assert body["upsell_data"] == []


@pytest.mark.asyncio
async def test_multiroom_order_ids_fallback_to_rooms(order_finish, transport, context):
    transport.script(
        ENDPOINT_ORDER_FINISH_MULTIROOM,
        {
            "rooms": [{"roomIndex": 0, "order_id": 11}, {"roomIndex": 1, "order_id": 12}],
            "failed": [],
            "total_rooms": 2,
            "successful_rooms": 2,
            "failed_rooms": 0,
        },
    )
    request = MultiroomFinishRequest(
        rooms=[MultiroomFinishRoom("11", "a"), MultiroomFinishRoom("12", "b")],
        partner_order_id="BK-1",
        email="a@b.com",
    )

    result = await order_finish.execute_multiroom(request, context)

    assert result.order_ids == ["11", "12"]


@pytest.mark.asyncio
async def test_multiroom_all_rooms_failed(order_finish, transport, context):
    request = MultiroomFinishRequest(
        rooms=[MultiroomFinishRoom("404", "x")],
        partner_order_id="BK-1",
        email="a@b.com",
    )

    with pytest.raises(SupplierError) as exc_info:
        await order_finish.execute_multiroom(request, context)

    assert exc_info.value.code == "order_not_found"
