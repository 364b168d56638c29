import logging
from typing import Any

from hotel_booking.application.dtos.booking_dto import (
    MultiroomPrebookResult,
    PrebookedRoom,
    PrebookResult,
    RequestContext,
)
from hotel_booking.application.interfaces.clock import Clock
from hotel_booking.application.interfaces.supplier_transport import SupplierTransport
from hotel_booking.application.retry import PREBOOK_RETRY_DELAY_SECONDS, single_retry
from hotel_booking.domain.constants import ENDPOINT_PREBOOK, ENDPOINT_PREBOOK_MULTIROOM
from hotel_booking.domain.entities.booked_rate import BookedRate
from hotel_booking.domain.entities.multiroom import MultiroomBatch
from hotel_booking.domain.errors import BookingValidationError, PrebookFailedError
from hotel_booking.domain.value_objects.money import Money


class PrebookUseCase:
    """
    Paso 2: Prebook - valida disponibilidad y retiene la tarifa.

    Ante una falla transitoria hace exactamente un reintento tras ~1.2 s.
    Los errores del proveedor (rate_not_found, contract_mismatch, ...) no se
    reintentan.
    """

    def __init__(
        self,
        transport: SupplierTransport,
        clock: Clock,
        retry_delay_seconds: float = PREBOOK_RETRY_DELAY_SECONDS,
    ) -> None:
        self._transport = transport
        self._clock = clock
        self._retry_delay_seconds = retry_delay_seconds
        self._logger = logging.getLogger(__name__)

    async def execute(self, rate: BookedRate, context: RequestContext) -> PrebookResult:
        body = {
            **rate.hash_payload(),
            "residency": rate.residency,
            "currency": rate.currency,
            "price_increase_percent": rate.price_increase_percent,
        }

        async def _call() -> dict[str, Any]:
            response = await self._transport.call(ENDPOINT_PREBOOK, body, context)
            return response.raise_for_error()

        data = await single_retry(_call, clock=self._clock, delay=self._retry_delay_seconds)

        book_hash = data.get("booking_hash") or data.get("book_hash")
        if not book_hash:
            raise PrebookFailedError("Prebook response did not include a booking hash")

        price = _read_price(data, rate.currency)
        original_price = None
        if data.get("original_price") not in (None, ""):
            original_price = Money.from_payload(
                {"amount": data["original_price"], "currency_code": data.get("currency")},
                default_currency=rate.currency,
            )

        result = PrebookResult(
            book_hash=str(book_hash),
            price=price,
            price_changed=bool(data.get("price_changed")),
            original_price=original_price,
            raw=data,
        )
        self._logger.info(
            "Prebook success",
            extra={
                "rate_hash": rate.hash,
                "book_hash": result.book_hash,
                "price_changed": result.price_changed,
            },
        )
        return result

    async def execute_multiroom(
        self,
        rates: list[BookedRate],
        context: RequestContext,
        currency: str = "USD",
    ) -> MultiroomPrebookResult:
        if not rates:
            raise BookingValidationError("rooms", "At least one room is required")

        body = {
            "rooms": [
                {
                    **rate.hash_payload(),
                    "guests": [occupancy.to_payload() for occupancy in rate.occupancy],
                    "residency": rate.residency,
                    "price_increase_percent": rate.price_increase_percent,
                }
                for rate in rates
            ],
            "currency": currency,
            "language": context.language,
        }

        async def _call() -> dict[str, Any]:
            response = await self._transport.call(ENDPOINT_PREBOOK_MULTIROOM, body, context)
            return response.raise_for_error()

        data = await single_retry(
            _call, clock=self._clock, delay=self._retry_delay_seconds, step="prebook_multiroom"
        )
        batch = MultiroomBatch.from_payload(data)

        if batch.all_failed or not batch.rooms:
            first = batch.failed[0] if batch.failed else None
            raise PrebookFailedError(
                message=first.error if first and first.error else "All rooms failed to prebook",
                supplier_code=first.code if first else None,
            )

        rooms = []
        for position, room in enumerate(batch.rooms):
            room_index = int(room.get("roomIndex", room.get("room_index", position)))
            rooms.append(
                PrebookedRoom(
                    room_index=room_index,
                    book_hash=str(room.get("booking_hash") or room.get("book_hash")),
                    original_hash=_original_hash(rates, room_index),
                    price=_read_price(room, currency),
                    price_changed=bool(room.get("price_changed")),
                )
            )

        if batch.is_partial:
            self._logger.warning(
                "Multiroom prebook partially failed",
                extra={
                    "total_rooms": batch.total_rooms,
                    "successful_rooms": batch.successful_rooms,
                    "failed_rooms": batch.failed_rooms,
                },
            )
        else:
            self._logger.info(
                "Multiroom prebook success", extra={"total_rooms": batch.total_rooms}
            )
        return MultiroomPrebookResult(batch=batch, rooms=rooms)


def _read_price(data: dict[str, Any], default_currency: str) -> Money | None:
    price = Money.from_payload(data.get("final_price"), default_currency)
    if price is not None:
        return price
    for key in ("price", "new_price"):
        value = data.get(key)
        if isinstance(value, dict):
            price = Money.from_payload(value, default_currency)
        elif value not in (None, ""):
            price = Money.from_payload(
                {"amount": value, "currency_code": data.get("currency")}, default_currency
            )
        if price is not None:
            return price
    return None


def _original_hash(rates: list[BookedRate], room_index: int) -> str | None:
    if 0 <= room_index < len(rates):
        return rates[room_index].hash
    return None
