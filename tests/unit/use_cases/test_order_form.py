import pytest

from hotel_booking.application.interfaces.supplier_transport import SupplierResponse
from hotel_booking.domain.constants import (
    ENDPOINT_ORDER_FORM,
    ENDPOINT_ORDER_FORM_MULTIROOM,
    ENDPOINT_ORDERS_BATCH,
)
from hotel_booking.domain.errors import (
    BookingSessionExpiredError,
    BookingValidationError,
    OrderFormRetriesExhaustedError,
    RateLimitedError,
    SupplierError,
    TerminalSupplierError,
)
from hotel_booking.domain.value_objects.money import Money
from hotel_booking.infrastructure.in_memory.supplier_transport import LostResponse

pytestmark = pytest.mark.unit

PID = "BK-1700000000-AB12CD"


def _double_booking():
    return SupplierResponse.failure("double_booking_form", "Order already exists")


@pytest.mark.asyncio
async def test_order_form_success(order_form_use_case, transport, clock, context):
    result = await order_form_use_case.execute("p-bh_123", PID, context)

    assert result.order_id == "9001"
    assert result.item_id == "9001-1"
    assert result.partner_order_id == PID
    assert not result.recovered
    assert result.payment_types_available == ["deposit"]
    assert str(result.final_price) == "199.00 USD"
    assert result.required_fields[0]["name"] == "first_name"
    assert clock.sleeps == []

    body = transport.calls_to(ENDPOINT_ORDER_FORM)[0]
    assert body["book_hash"] == "p-bh_123"
    assert body["partner_order_id"] == PID
    assert body["language"] == "en"
    assert body["user_ip"] == "203.0.113.7"


@pytest.mark.asyncio
async def test_missing_inputs_fail_before_network(order_form_use_case, transport, context):
    with pytest.raises(BookingValidationError) as exc_info:
        await order_form_use_case.execute("", PID, context)
    assert exc_info.value.field == "book_hash"

    with pytest.raises(BookingValidationError) as exc_info:
        await order_form_use_case.execute("p-1", "", context)
    assert exc_info.value.field == "partner_order_id"

    assert transport.calls == []


@pytest.mark.asyncio
async def test_terminal_code_fails_immediately(order_form_use_case, transport, clock, context):
    transport.script(
        ENDPOINT_ORDER_FORM, SupplierResponse.failure("rate_not_found", "Rate not found")
    )

    with pytest.raises(TerminalSupplierError) as exc_info:
        await order_form_use_case.execute("p-1", PID, context)

    assert exc_info.value.code == "rate_not_found"
    assert len(transport.calls_to(ENDPOINT_ORDER_FORM)) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_retryable_code_exhausts_budget(order_form_use_case, transport, clock, context):
    transport.script(
        ENDPOINT_ORDER_FORM,
        *[SupplierResponse.failure("timeout", "Supplier timeout") for _ in range(10)],
    )

    with pytest.raises(OrderFormRetriesExhaustedError) as exc_info:
        await order_form_use_case.execute("p-1", PID, context)

    assert exc_info.value.attempts == 10
    assert isinstance(exc_info.value.last_error, SupplierError)
    assert len(transport.calls_to(ENDPOINT_ORDER_FORM)) == 10
    assert clock.sleeps == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0, 10.0, 10.0, 10.0]


@pytest.mark.asyncio
async def test_unknown_code_then_success(order_form_use_case, transport, clock, context):
    transport.script(ENDPOINT_ORDER_FORM, SupplierResponse.failure("unknown", "Unknown error"))

    result = await order_form_use_case.execute("p-1", PID, context)

    assert result.order_id == "9001"
    assert clock.sleeps == [1.0]


@pytest.mark.asyncio
async def test_lost_response_is_recovered_without_second_order(
    order_form_use_case, transport, clock, context
):
    # el proveedor crea la orden pero la respuesta se pierde; el reintento
    # recibe double_booking_form y se recupera la misma orden
    transport.script(ENDPOINT_ORDER_FORM, LostResponse())

    result = await order_form_use_case.execute("p-1", PID, context)

    assert result.order_id == "9001"
    assert result.item_id == "9001-1"
    assert result.recovered
    assert result.final_price == Money.zero()
    assert result.required_fields == []
    assert result.payment_types_available == ["deposit"]
    assert len(transport.orders) == 1
    assert len(transport.calls_to(ENDPOINT_ORDER_FORM)) == 2
    assert clock.sleeps == [1.0]

    batch_body = transport.calls_to(ENDPOINT_ORDERS_BATCH)[0]
    assert batch_body["search"] == {"partner_order_id": [PID]}
    assert batch_body["pagination"] == {"page_size": "1", "page_number": "1"}
    assert batch_body["ordering"] == {"ordering_type": "desc", "ordering_by": "created_at"}


@pytest.mark.asyncio
async def test_duplicate_signal_in_exception_message(order_form_use_case, transport, clock, context):
    transport.script(
        ENDPOINT_ORDER_FORM, RuntimeError("Order form failed: double_booking_form")
    )
    transport.script(
        ENDPOINT_ORDERS_BATCH,
        {
            "orders": [
                {
                    "order_id": 555,
                    "rooms_data": [{"item_id": 777}],
                    "payment_data": {"payment_type": "hotel"},
                }
            ]
        },
    )

    result = await order_form_use_case.execute("p-1", PID, context)

    assert result.recovered
    assert result.order_id == "555"
    assert result.item_id == "777"
    assert result.payment_types == [{"type": "hotel"}]
    assert result.payment_types_available == ["hotel"]
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_duplicate_without_existing_order_expires_session(
    order_form_use_case, transport, context
):
    transport.script(ENDPOINT_ORDER_FORM, _double_booking())
    transport.script(ENDPOINT_ORDERS_BATCH, {"orders": []})

    with pytest.raises(BookingSessionExpiredError) as exc_info:
        await order_form_use_case.execute("p-1", PID, context)

    assert exc_info.value.partner_order_id == PID


@pytest.mark.asyncio
async def test_fetch_failure_message_is_retried(order_form_use_case, transport, clock, context):
    transport.script(ENDPOINT_ORDER_FORM, RuntimeError("Failed to fetch"))

    result = await order_form_use_case.execute("p-1", PID, context)

    assert result.order_id == "9001"
    assert clock.sleeps == [1.0]


@pytest.mark.asyncio
async def test_http_5xx_is_retried(order_form_use_case, transport, clock, context):
    transport.script(
        ENDPOINT_ORDER_FORM,
        SupplierResponse.failure("http_error", "Bad Gateway", http_status=502),
        SupplierResponse.failure("http_error", "Service Unavailable", http_status=503),
    )

    result = await order_form_use_case.execute("p-1", PID, context)

    assert result.order_id == "9001"
    assert clock.sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_unexpected_error_is_not_retried(order_form_use_case, transport, clock, context):
    transport.script(ENDPOINT_ORDER_FORM, RuntimeError("boom"))

    with pytest.raises(RuntimeError, match="boom"):
        await order_form_use_case.execute("p-1", PID, context)

    assert len(transport.calls_to(ENDPOINT_ORDER_FORM)) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_error_without_code_is_not_retried(order_form_use_case, transport, clock, context):
    transport.script(
        ENDPOINT_ORDER_FORM,
        SupplierResponse.from_body(
            {"status": "error", "error": {"message": "Hotel rejected the request"}}
        ),
    )

    with pytest.raises(SupplierError) as exc_info:
        await order_form_use_case.execute("p-1", PID, context)

    assert exc_info.value.code == "supplier_error"
    assert exc_info.value.message == "Hotel rejected the request"
    assert len(transport.calls_to(ENDPOINT_ORDER_FORM)) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_rate_limit_propagates(order_form_use_case, transport, clock, context):
    transport.script(ENDPOINT_ORDER_FORM, RateLimitedError(retry_after_seconds=30))

    with pytest.raises(RateLimitedError):
        await order_form_use_case.execute("p-1", PID, context)

    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_response_without_item_id_is_rejected(order_form_use_case, transport, context):
    transport.script(ENDPOINT_ORDER_FORM, {"order_id": 1})

    with pytest.raises(SupplierError) as exc_info:
        await order_form_use_case.execute("p-1", PID, context)

    assert exc_info.value.code == "invalid_order_form"


@pytest.mark.asyncio
async def test_payment_types_detail_takes_precedence(order_form_use_case, transport, context):
    transport.script(
        ENDPOINT_ORDER_FORM,
        {
            "order_id": 10,
            "item_id": 20,
            "payment_types": ["deposit"],
            "payment_types_detail": [
                {"type": "hotel", "amount": "210.00", "currency_code": "EUR", "is_need_credit_card_data": True}
            ],
        },
    )

    result = await order_form_use_case.execute("p-1", PID, context)

    assert result.payment_types[0]["type"] == "hotel"
    assert result.payment_types_available == ["hotel"]
    assert result.final_price == Money.zero()


# ============================================================================
# MULTIROOM
# ============================================================================


@pytest.mark.asyncio
async def test_multiroom_order_form(order_form_use_case, transport, context):
    result = await order_form_use_case.execute_multiroom(["p-1", "p-2"], PID, context)

    assert [form.order_id for form in result.forms] == ["9001", "9002"]
    assert [form.room_index for form in result.forms] == [0, 1]
    assert not result.recovered
    assert result.batch.successful_rooms == 2

    body = transport.calls_to(ENDPOINT_ORDER_FORM_MULTIROOM)[0]
    assert body["book_hash"] == "p-1"
    assert body["prebooked_rooms"] == [{"book_hash": "p-1"}, {"book_hash": "p-2"}]
    assert body["partner_order_id"] == PID


@pytest.mark.asyncio
async def test_multiroom_requires_every_hash(order_form_use_case, transport, context):
    with pytest.raises(BookingValidationError):
        await order_form_use_case.execute_multiroom(["p-1", ""], PID, context)

    assert transport.calls == []


@pytest.mark.asyncio
async def test_multiroom_all_rooms_failed_is_terminal(order_form_use_case, transport, clock, context):
    transport.script(
        ENDPOINT_ORDER_FORM_MULTIROOM,
        {
            "rooms": [],
            "failed": [{"roomIndex": 0, "error": "Rate not found", "code": "rate_not_found"}],
            "total_rooms": 1,
            "successful_rooms": 0,
            "failed_rooms": 1,
        },
    )

    with pytest.raises(TerminalSupplierError):
        await order_form_use_case.execute_multiroom(["p-1"], PID, context)

    assert len(transport.calls_to(ENDPOINT_ORDER_FORM_MULTIROOM)) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_multiroom_partial_failure_keeps_successful_rooms(
    order_form_use_case, transport, context
):
    transport.script(
        ENDPOINT_ORDER_FORM_MULTIROOM,
        {
            "rooms": [{"roomIndex": 1, "order_id": 71, "item_id": 72}],
            "failed": [{"roomIndex": 0, "error": "Sold out", "code": "soldout"}],
            "total_rooms": 2,
            "successful_rooms": 1,
            "failed_rooms": 1,
            "payment_types_available": ["deposit", "hotel"],
        },
    )

    result = await order_form_use_case.execute_multiroom(["p-1", "p-2"], PID, context)

    assert result.batch.is_partial
    assert len(result.forms) == 1
    assert result.forms[0].room_index == 1
    assert result.forms[0].payment_types_available == ["deposit", "hotel"]


@pytest.mark.asyncio
async def test_multiroom_lost_response_recovers_rooms_in_order(
    order_form_use_case, transport, clock, context
):
    transport.script(ENDPOINT_ORDER_FORM_MULTIROOM, LostResponse())

    result = await order_form_use_case.execute_multiroom(["p-1", "p-2"], PID, context)

    assert result.recovered
    assert [form.order_id for form in result.forms] == ["9001", "9002"]
    assert all(form.recovered for form in result.forms)
    assert result.batch.failed == []
    assert len(transport.orders) == 2
    assert clock.sleeps == [1.0]
    assert transport.calls_to(ENDPOINT_ORDERS_BATCH)[0]["pagination"]["page_size"] == "2"


@pytest.mark.asyncio
async def test_multiroom_recovery_marks_missing_rooms(order_form_use_case, transport, context):
    transport.script(ENDPOINT_ORDER_FORM_MULTIROOM, _double_booking())
    transport.script(
        ENDPOINT_ORDERS_BATCH,
        {"orders": [{"order_id": 1, "item_id": 2, "payment_types": ["deposit"]}]},
    )

    result = await order_form_use_case.execute_multiroom(["p-1", "p-2"], PID, context)

    assert [form.order_id for form in result.forms] == ["1"]
    assert result.batch.failed_rooms == 1
    assert result.batch.failed[0].code == "not_recovered"
    assert result.batch.failed[0].book_hash == "p-2"
