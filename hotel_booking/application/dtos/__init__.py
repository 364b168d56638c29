"""DTOs (Data Transfer Objects) de la capa de aplicación."""

from hotel_booking.application.dtos.booking_dto import (
    BookingOutcome,
    MultiroomBookingOutcome,
    MultiroomFinishRequest,
    MultiroomFinishResult,
    MultiroomFinishRoom,
    MultiroomOrderFormResult,
    MultiroomPrebookResult,
    OrderFinishRequest,
    OrderFinishResult,
    OrderFormResult,
    PrebookedRoom,
    PrebookResult,
    RecoveredOrder,
    RequestContext,
)

__all__ = [
    "RequestContext",
    "PrebookResult",
    "PrebookedRoom",
    "MultiroomPrebookResult",
    "OrderFormResult",
    "MultiroomOrderFormResult",
    "RecoveredOrder",
    "OrderFinishRequest",
    "OrderFinishResult",
    "MultiroomFinishRoom",
    "MultiroomFinishRequest",
    "MultiroomFinishResult",
    "BookingOutcome",
    "MultiroomBookingOutcome",
]
