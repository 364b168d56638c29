"""
Polling de estado de órdenes hasta llegar a un estado terminal.

Un timeout de polling NO es un fallo de la reserva: significa "estado
desconocido, volver a consultar". Las excepciones de una consulta individual
se toleran; la orden puede estar confirmándose del lado del proveedor.
"""

import asyncio
import logging
from typing import Callable

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.interfaces.clock import Clock
from hotel_booking.application.use_cases.order_status import GetOrderStatusUseCase
from hotel_booking.domain.entities.order import OrderStatusSnapshot
from hotel_booking.domain.errors import StatusPollingTimeoutError

logger = logging.getLogger(__name__)

STATUS_POLL_MAX_ATTEMPTS = 20
STATUS_POLL_INTERVAL_SECONDS = 3.0

StatusCallback = Callable[[OrderStatusSnapshot, int], None]


class StatusPoller:
    def __init__(
        self,
        get_order_status: GetOrderStatusUseCase,
        clock: Clock,
        max_attempts: int = STATUS_POLL_MAX_ATTEMPTS,
        interval_seconds: float = STATUS_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._get_order_status = get_order_status
        self._clock = clock
        self._max_attempts = max_attempts
        self._interval_seconds = interval_seconds

    async def poll(
        self,
        order_id: str,
        context: RequestContext,
        on_status: StatusCallback | None = None,
        max_attempts: int | None = None,
        interval_seconds: float | None = None,
    ) -> OrderStatusSnapshot:
        """
        Consulta el estado de una orden hasta que sea terminal.

        Args:
            order_id: Orden a consultar
            context: Contexto de la solicitud
            on_status: Callback invocado en cada consulta exitosa (snapshot, intento)

        Returns:
            El primer snapshot con estado terminal (confirmed/failed/cancelled)

        Raises:
            StatusPollingTimeoutError: Se agotaron los intentos sin estado terminal
        """
        max_attempts = self._max_attempts if max_attempts is None else max_attempts
        interval = self._interval_seconds if interval_seconds is None else interval_seconds
        last_status: str | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                snapshot = await self._get_order_status.execute(order_id, context)
            except Exception as exc:
                logger.warning(
                    "Status poll attempt failed",
                    extra={"order_id": order_id, "attempt": attempt, "error": str(exc)},
                )
            else:
                if on_status is not None:
                    on_status(snapshot, attempt)
                if snapshot.is_terminal:
                    logger.info(
                        "Order reached terminal status",
                        extra={"order_id": order_id, "status": snapshot.status, "attempt": attempt},
                    )
                    return snapshot
                last_status = snapshot.status or last_status

            if attempt < max_attempts:
                await self._clock.sleep(interval)

        logger.warning(
            "Status polling timeout",
            extra={"order_id": order_id, "attempts": max_attempts, "last_status": last_status},
        )
        raise StatusPollingTimeoutError(
            order_id=order_id, attempts=max_attempts, last_status=last_status
        )

    async def poll_many(
        self,
        order_ids: list[str],
        context: RequestContext,
        on_status: StatusCallback | None = None,
        max_attempts: int | None = None,
        interval_seconds: float | None = None,
    ) -> dict[str, OrderStatusSnapshot]:
        """
        Consulta varias órdenes en paralelo por ronda.

        Las órdenes que llegan a estado terminal salen del conjunto pendiente;
        una consulta que falla deja la orden pendiente. Al agotar los intentos
        devuelve el mapa parcial sin lanzar excepción: las órdenes ausentes
        tienen estado desconocido.
        """
        max_attempts = self._max_attempts if max_attempts is None else max_attempts
        interval = self._interval_seconds if interval_seconds is None else interval_seconds
        pending = list(dict.fromkeys(order_ids))
        results: dict[str, OrderStatusSnapshot] = {}

        for attempt in range(1, max_attempts + 1):
            if not pending:
                break

            outcomes = await asyncio.gather(
                *(self._get_order_status.execute(order_id, context) for order_id in pending),
                return_exceptions=True,
            )

            still_pending = []
            for order_id, outcome in zip(pending, outcomes):
                if isinstance(outcome, BaseException):
                    logger.warning(
                        "Status poll failed for order",
                        extra={"order_id": order_id, "attempt": attempt, "error": str(outcome)},
                    )
                    still_pending.append(order_id)
                    continue
                if on_status is not None:
                    on_status(outcome, attempt)
                if outcome.is_terminal:
                    results[order_id] = outcome
                else:
                    still_pending.append(order_id)
            pending = still_pending

            if pending and attempt < max_attempts:
                await self._clock.sleep(interval)

        if pending:
            logger.warning(
                "Multiroom polling finished with pending orders",
                extra={"pending_order_ids": pending, "resolved": len(results)},
            )
        return results
