"""
Circuit Breaker configuration for the hotel supplier backend.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, limited requests allowed

Only transport-level faults count as failures: network errors and 5xx
responses. Supplier business errors (rate_not_found, double_booking_form, ...)
and 429 responses pass through the breaker as successful calls.
"""

import logging

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)

DEFAULT_FAIL_MAX = 5
DEFAULT_RESET_TIMEOUT = 60


def log_circuit_state_change(breaker_name: str, old_state: str, new_state: str) -> None:
    logger.warning(
        "Circuit breaker state changed",
        extra={
            "breaker_name": breaker_name,
            "old_state": old_state,
            "new_state": new_state,
        },
    )


class StateChangeLogger(CircuitBreakerListener):
    """Listener for circuit breaker state changes."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        log_circuit_state_change(
            self.name,
            old_state.name if old_state else "none",
            new_state.name,
        )


supplier_breaker = CircuitBreaker(
    fail_max=DEFAULT_FAIL_MAX,
    reset_timeout=DEFAULT_RESET_TIMEOUT,
    name="supplier_circuit_breaker",
    listeners=[StateChangeLogger("supplier")],
)


def configure_supplier_breaker(fail_max: int, reset_timeout: int) -> CircuitBreaker:
    """Apply settings to the shared breaker (called once at startup)."""
    supplier_breaker.fail_max = fail_max
    supplier_breaker.reset_timeout = reset_timeout
    return supplier_breaker


def reset_supplier_breaker() -> None:
    supplier_breaker.close()


__all__ = [
    "supplier_breaker",
    "configure_supplier_breaker",
    "reset_supplier_breaker",
    "CircuitBreakerError",
]
