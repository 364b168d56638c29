"""
Retry policies for the booking steps.

Two deliberately separate policies:

- `single_retry`: one blind retry after a fixed short delay. Used by Prebook,
  whose rate holds are short-lived.
- `bounded_backoff_retry`: up to `max_attempts` attempts with exponential
  backoff `min(base_delay * 2 ** (attempt - 1), max_delay)`. Used by
  OrderForm, with `double_booking_form` routed to a recovery callback.

OrderFinish has no retry policy at all.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from hotel_booking.application.error_classifier import RETRY_KINDS, ErrorKind, classify_error
from hotel_booking.application.interfaces.clock import Clock
from hotel_booking.domain.errors import (
    OrderFormRetriesExhaustedError,
    SupplierError,
    TerminalSupplierError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PREBOOK_RETRY_DELAY_SECONDS = 1.2
ORDER_FORM_MAX_ATTEMPTS = 10
ORDER_FORM_BASE_DELAY_SECONDS = 1.0
ORDER_FORM_MAX_DELAY_SECONDS = 10.0


def backoff_delay(
    attempt: int,
    base_delay: float = ORDER_FORM_BASE_DELAY_SECONDS,
    max_delay: float = ORDER_FORM_MAX_DELAY_SECONDS,
) -> float:
    """
    Delay to wait after failed attempt number `attempt` (1-based).

    Example:
        >>> [backoff_delay(n) for n in range(1, 7)]
        [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]
    """
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


async def single_retry(
    operation: Callable[[], Awaitable[T]],
    clock: Clock,
    delay: float = PREBOOK_RETRY_DELAY_SECONDS,
    step: str = "prebook",
) -> T:
    """
    Run `operation`; on a transport or retryable failure wait `delay` seconds
    and run it exactly once more. The second failure propagates unchanged.
    """
    try:
        return await operation()
    except Exception as exc:
        kind = classify_error(exc)
        if kind not in RETRY_KINDS:
            raise

        logger.warning(
            "Transient failure, retrying once",
            extra={"step": step, "retry_delay": delay, "error": str(exc), "error_kind": kind.value},
        )
        await clock.sleep(delay)
        return await operation()


async def bounded_backoff_retry(
    operation: Callable[[int], Awaitable[T]],
    clock: Clock,
    on_duplicate: Callable[[BaseException], Awaitable[T]] | None = None,
    max_attempts: int = ORDER_FORM_MAX_ATTEMPTS,
    base_delay: float = ORDER_FORM_BASE_DELAY_SECONDS,
    max_delay: float = ORDER_FORM_MAX_DELAY_SECONDS,
    step: str = "order_form",
) -> T:
    """
    Retry `operation` with exponential backoff.

    Args:
        operation: Async callable receiving the 1-based attempt number
        clock: Clock used for the backoff waits
        on_duplicate: Called instead of retrying when the error is a
            duplicate-booking-form signal
        max_attempts: Total attempt budget (default: 10)

    Returns:
        The result of the first successful attempt, or of `on_duplicate`

    Raises:
        TerminalSupplierError: terminal supplier code, on the first occurrence
        OrderFormRetriesExhaustedError: budget exhausted on retryable errors
        Any other non-retryable error unchanged
    """
    last_error: BaseException | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation(attempt)
        except Exception as exc:
            kind = classify_error(exc)

            if kind is ErrorKind.DUPLICATE_FORM and on_duplicate is not None:
                logger.info(
                    "Duplicate booking form detected, resolving existing order",
                    extra={"step": step, "attempt": attempt},
                )
                return await on_duplicate(exc)

            if kind is ErrorKind.TERMINAL:
                logger.error(
                    "Terminal supplier error, not retrying",
                    extra={"step": step, "attempt": attempt, "error_code": getattr(exc, "code", None)},
                )
                if isinstance(exc, SupplierError) and not isinstance(exc, TerminalSupplierError):
                    raise TerminalSupplierError(
                        code=exc.code, message=exc.message, http_status=exc.http_status
                    ) from exc
                raise

            if kind not in RETRY_KINDS:
                raise

            last_error = exc
            if attempt < max_attempts:
                delay = backoff_delay(attempt, base_delay, max_delay)
                logger.warning(
                    "Retryable failure, backing off",
                    extra={
                        "step": step,
                        "attempt": attempt,
                        "max_attempts": max_attempts,
                        "retry_delay": delay,
                        "error": str(exc),
                        "error_kind": kind.value,
                    },
                )
                await clock.sleep(delay)

    logger.error(
        "Retry budget exhausted",
        extra={"step": step, "attempts": max_attempts, "error": str(last_error)},
    )
    raise OrderFormRetriesExhaustedError(attempts=max_attempts, last_error=last_error)
