import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, TypeVar

from hotel_booking.application.interfaces.clock import Clock
from hotel_booking.application.interfaces.order_form_lock import OrderFormLock

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 30.0


class InMemoryOrderFormLock(OrderFormLock):
    """
    Lock en proceso por PartnerOrderId.

    La primera llamada ejecuta la fábrica; las concurrentes esperan la misma
    tarea. Un resultado exitoso se cachea durante `ttl_seconds`; un fallo
    limpia la entrada para que la siguiente llamada vuelva a intentar.
    """

    def __init__(self, clock: Clock, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self._clock = clock
        self._ttl = timedelta(seconds=ttl_seconds)
        self._inflight: dict[str, asyncio.Future] = {}
        self._completed: dict[str, tuple[datetime, Any]] = {}

    async def run(self, partner_order_id: str, factory: Callable[[], Awaitable[T]]) -> T:
        self._evict_expired()

        cached = self._completed.get(partner_order_id)
        if cached is not None:
            logger.info(
                "Returning cached order form result",
                extra={"partner_order_id": partner_order_id},
            )
            return cached[1]

        task = self._inflight.get(partner_order_id)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[partner_order_id] = task
            task.add_done_callback(lambda done: self._on_done(partner_order_id, done))
        else:
            logger.info(
                "Order form already in flight, awaiting shared result",
                extra={"partner_order_id": partner_order_id},
            )

        return await asyncio.shield(task)

    def _evict_expired(self) -> None:
        # entradas en orden de inserción: las más viejas primero
        now = self._clock.now()
        while self._completed:
            partner_order_id, (stored_at, _) = next(iter(self._completed.items()))
            if now - stored_at < self._ttl:
                break
            del self._completed[partner_order_id]

    def _on_done(self, partner_order_id: str, task: asyncio.Future) -> None:
        if self._inflight.get(partner_order_id) is task:
            del self._inflight[partner_order_id]
        if task.cancelled() or task.exception() is not None:
            return
        self._completed.pop(partner_order_id, None)
        self._completed[partner_order_id] = (self._clock.now(), task.result())

    def clear(self, partner_order_id: str) -> None:
        self._inflight.pop(partner_order_id, None)
        self._completed.pop(partner_order_id, None)

    def clear_all(self) -> int:
        cleared = len(self._completed) + len(self._inflight)
        self._inflight.clear()
        self._completed.clear()
        return cleared
