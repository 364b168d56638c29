"""
Normalization of raised errors into a single error-kind enum.

The supplier reports `double_booking_form` either as a structured error code
or embedded in the message of a thrown error, and transport faults arrive
either typed (`SupplierTransportError`) or as plain exceptions. Every retry
decision in the booking flow branches on `ErrorKind` only; this module is the
one place that looks at raw message text.
"""

import re
from enum import Enum

from hotel_booking.domain.constants import (
    ERROR_DOUBLE_BOOKING_FORM,
    FINAL_BOOKING_FAILURE_ERRORS,
    ORDER_FORM_TERMINAL_ERRORS,
    RETRYABLE_ERRORS,
    TRANSPORT_CIRCUIT_OPEN,
    TRANSPORT_NETWORK_ERROR,
)
from hotel_booking.domain.errors import (
    RateLimitedError,
    SupplierError,
    TerminalSupplierError,
)


class ErrorKind(str, Enum):
    TERMINAL = "terminal"
    RETRYABLE = "retryable"
    DUPLICATE_FORM = "duplicate_form"
    TRANSPORT = "transport"
    RATE_LIMITED = "rate_limited"
    FATAL = "fatal"


RETRY_KINDS = frozenset({ErrorKind.RETRYABLE, ErrorKind.TRANSPORT})

_TRANSPORT_KEYWORDS = ("network", "fetch")
_SERVER_ERROR_TEXT = re.compile(
    r"\b5\d\d\b|internal server error|bad gateway|service unavailable|gateway timeout"
)


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, RateLimitedError):
        return ErrorKind.RATE_LIMITED

    code = exc.code if isinstance(exc, SupplierError) else None
    message = str(exc).lower()

    if code == ERROR_DOUBLE_BOOKING_FORM or ERROR_DOUBLE_BOOKING_FORM in message:
        return ErrorKind.DUPLICATE_FORM

    if isinstance(exc, SupplierError):
        if isinstance(exc, TerminalSupplierError) or code in ORDER_FORM_TERMINAL_ERRORS:
            return ErrorKind.TERMINAL
        if code in FINAL_BOOKING_FAILURE_ERRORS:
            return ErrorKind.TERMINAL
        if code in RETRYABLE_ERRORS:
            return ErrorKind.RETRYABLE

    if _looks_like_transport_fault(exc, code, message):
        return ErrorKind.TRANSPORT

    return ErrorKind.FATAL


def _looks_like_transport_fault(exc: BaseException, code: str | None, message: str) -> bool:
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True
    if code in (TRANSPORT_NETWORK_ERROR, TRANSPORT_CIRCUIT_OPEN):
        return True
    http_status = getattr(exc, "http_status", None)
    if isinstance(http_status, int) and http_status >= 500:
        return True
    if any(keyword in message for keyword in _TRANSPORT_KEYWORDS):
        return True
    return bool(_SERVER_ERROR_TEXT.search(message))


BOOKING_ERROR_MESSAGES: dict[str, str] = {
    "3ds": "Card authentication failed. Please try a different payment method.",
    "block": "This booking has been blocked. Please contact support for assistance.",
    "book_limit": "Booking limit reached for this property. Please try again later.",
    "booking_finish_did_not_succeed": "Booking could not be completed. Please try again.",
    "charge": "Payment could not be processed. Please check your card details and try again.",
    "soldout": "This rate is no longer available. Please select a different room or rate.",
    "provider": "The hotel's system is temporarily unavailable. Please try again in a few minutes.",
    "not_allowed": "This booking is not permitted. Please contact support for assistance.",
    "timeout": "Request timed out. We're still checking the status...",
    "unknown": "An unexpected error occurred. We're still checking the status...",
}

DEFAULT_BOOKING_ERROR_MESSAGE = (
    "An unexpected error occurred. Please try again or contact support."
)


def user_message_for(code: str | None) -> str:
    if not code:
        return DEFAULT_BOOKING_ERROR_MESSAGE
    return BOOKING_ERROR_MESSAGES.get(code, DEFAULT_BOOKING_ERROR_MESSAGE)
