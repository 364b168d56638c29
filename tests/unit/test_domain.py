import re
from decimal import Decimal

import pytest

from hotel_booking.application.interfaces.partner_order_id_generator import (
    FakePartnerOrderIdGenerator,
    RealPartnerOrderIdGenerator,
)
from hotel_booking.application.interfaces.supplier_transport import SupplierResponse
from hotel_booking.domain.entities.booked_rate import BookedRate
from hotel_booking.domain.entities.guest import Guest
from hotel_booking.domain.entities.multiroom import MultiroomBatch
from hotel_booking.domain.entities.order import OrderStatusSnapshot
from hotel_booking.domain.errors import (
    SupplierError,
    SupplierTransportError,
    TerminalSupplierError,
)
from hotel_booking.domain.value_objects.money import Money
from hotel_booking.domain.value_objects.partner_order_id import PartnerOrderId

pytestmark = pytest.mark.unit


class TestPartnerOrderId:
    def test_generated_format(self):
        value = PartnerOrderId.generate(now_ms=1700000000000).value
        assert re.fullmatch(r"BK-1700000000000-[A-Z0-9]{6}", value)

    def test_real_generator_never_repeats(self):
        generator = RealPartnerOrderIdGenerator()
        values = {generator.generate().value for _ in range(200)}
        assert len(values) == 200

    def test_fake_generator_is_sequential(self):
        generator = FakePartnerOrderIdGenerator()
        assert generator.generate().value == "BK-TEST-000001"
        assert generator.generate().value == "BK-TEST-000002"

    @pytest.mark.parametrize("value", ["", "   ", "X" * 65])
    def test_rejects_invalid_values(self, value):
        with pytest.raises(ValueError):
            PartnerOrderId(value=value)


class TestMoney:
    def test_from_payload_accepts_both_currency_keys(self):
        assert Money.from_payload({"amount": "199.00", "currency_code": "USD"}) == Money(
            Decimal("199.00"), "USD"
        )
        assert Money.from_payload({"amount": 10, "currency": "EUR"}).currency_code == "EUR"

    def test_from_payload_without_amount(self):
        assert Money.from_payload({"currency_code": "USD"}) is None
        assert Money.from_payload(None) is None

    def test_payload_format(self):
        assert Money(Decimal("9"), "USD").as_payload() == {"amount": "9.00", "currency_code": "USD"}

    def test_addition_same_currency(self):
        total = Money(Decimal("199.00"), "USD") + Money(Decimal("0.50"), "USD")

        assert total == Money(Decimal("199.50"), "USD")

    def test_addition_rejects_different_currencies(self):
        with pytest.raises(ValueError):
            Money(Decimal("10"), "USD") + Money(Decimal("10"), "EUR")

    def test_addition_rejects_non_money(self):
        with pytest.raises(TypeError):
            Money(Decimal("10"), "USD") + Decimal("1")


class TestBookedRate:
    def test_requires_a_hash(self):
        with pytest.raises(ValueError):
            BookedRate()

    def test_match_hash_payload(self):
        rate = BookedRate(match_hash="m-1")
        assert rate.hash == "m-1"
        assert rate.hash_payload() == {"match_hash": "m-1"}

    def test_price_increase_range(self):
        with pytest.raises(ValueError):
            BookedRate(book_hash="h-1", price_increase_percent=101)


def test_guest_payload_omits_missing_age():
    assert Guest("Ada", "Lovelace").to_payload() == {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "is_child": False,
    }
    assert Guest("Tim", "Lovelace", is_child=True, age=7).to_payload()["age"] == 7


def test_multiroom_batch_counters():
    batch = MultiroomBatch.from_payload(
        {
            "rooms": [{"roomIndex": 0}],
            "failed": [{"roomIndex": 1, "error": "Sold out", "code": "soldout"}],
            "total_rooms": 2,
            "successful_rooms": 1,
            "failed_rooms": 1,
        }
    )
    assert batch.is_partial
    assert not batch.all_failed
    assert batch.failed[0].room_index == 1
    assert batch.failed[0].code == "soldout"


def test_status_snapshot_terminal_states():
    assert OrderStatusSnapshot("1", "confirmed").is_terminal
    assert OrderStatusSnapshot("1", "cancelled").is_terminal
    assert not OrderStatusSnapshot("1", "processing").is_terminal
    assert not OrderStatusSnapshot("1", None).is_terminal


class TestSupplierResponse:
    def test_data_wrapper(self):
        response = SupplierResponse.from_body({"status": "ok", "data": {"order_id": 1}})
        assert response.ok
        assert response.raise_for_error() == {"order_id": 1}

    def test_body_without_data_wrapper(self):
        response = SupplierResponse.from_body({"success": True, "order_id": 1})
        assert response.data == {"order_id": 1}

    def test_structured_error(self):
        response = SupplierResponse.from_body(
            {"status": "error", "error": {"code": "rate_not_found", "message": "Gone"}}
        )
        with pytest.raises(TerminalSupplierError):
            response.raise_for_error()

    def test_string_error(self):
        response = SupplierResponse.from_body({"error": "double_booking_form"})
        assert response.error.code == "double_booking_form"
        with pytest.raises(SupplierError):
            response.raise_for_error()

    def test_status_error_without_details(self):
        response = SupplierResponse.from_body({"status": "error"})
        assert response.error.code == "supplier_error"

    def test_transport_codes_raise_transport_errors(self):
        response = SupplierResponse.failure("network_error", "Network error", None)
        with pytest.raises(SupplierTransportError):
            response.raise_for_error()
