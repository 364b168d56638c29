from functools import lru_cache
from typing import Any

from fastapi import Depends, Header, Request

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.interfaces.clock import Clock, SystemClock
from hotel_booking.application.interfaces.partner_order_id_generator import (
    PartnerOrderIdGenerator,
    RealPartnerOrderIdGenerator,
)
from hotel_booking.application.interfaces.supplier_transport import SupplierTransport
from hotel_booking.application.use_cases.complete_booking import CompleteBookingUseCase
from hotel_booking.application.use_cases.order_finish import OrderFinishUseCase
from hotel_booking.application.use_cases.order_form import OrderFormUseCase
from hotel_booking.application.use_cases.order_status import GetOrderStatusUseCase
from hotel_booking.application.use_cases.poll_order_status import StatusPoller
from hotel_booking.application.use_cases.post_booking import PostBookingUseCase
from hotel_booking.application.use_cases.prebook import PrebookUseCase
from hotel_booking.application.use_cases.recover_order import OrderRecoveryResolver
from hotel_booking.config import Settings, get_settings
from hotel_booking.infrastructure.gateways.supplier_transport_http import SupplierTransportHTTP
from hotel_booking.infrastructure.in_memory.order_form_lock import InMemoryOrderFormLock
from hotel_booking.infrastructure.in_memory.supplier_transport import StubSupplierTransport


def build_use_cases(
    settings: Settings,
    transport: SupplierTransport,
    clock: Clock,
    partner_order_id_generator: PartnerOrderIdGenerator,
) -> dict[str, Any]:
    recovery_resolver = OrderRecoveryResolver(transport=transport)
    prebook = PrebookUseCase(
        transport=transport,
        clock=clock,
        retry_delay_seconds=settings.prebook_retry_delay_seconds,
    )
    order_form = OrderFormUseCase(
        transport=transport,
        recovery_resolver=recovery_resolver,
        clock=clock,
        order_form_lock=InMemoryOrderFormLock(
            clock=clock, ttl_seconds=settings.order_form_lock_ttl_seconds
        ),
        max_attempts=settings.order_form_max_attempts,
        base_delay_seconds=settings.order_form_backoff_base_seconds,
        max_delay_seconds=settings.order_form_backoff_max_seconds,
    )
    order_finish = OrderFinishUseCase(transport=transport)
    order_status = GetOrderStatusUseCase(transport=transport)
    status_poller = StatusPoller(
        get_order_status=order_status,
        clock=clock,
        max_attempts=settings.status_poll_max_attempts,
        interval_seconds=settings.status_poll_interval_seconds,
    )
    return {
        "transport": transport,
        "prebook": prebook,
        "order_form": order_form,
        "order_finish": order_finish,
        "order_status": order_status,
        "status_poller": status_poller,
        "post_booking": PostBookingUseCase(transport=transport, clock=clock),
        "partner_order_id_generator": partner_order_id_generator,
        "complete_booking": CompleteBookingUseCase(
            prebook=prebook,
            order_form=order_form,
            order_finish=order_finish,
            status_poller=status_poller,
            partner_order_id_generator=partner_order_id_generator,
        ),
    }


def build_transport(settings: Settings) -> SupplierTransport:
    if settings.use_in_memory:
        return StubSupplierTransport(currency=settings.default_currency)
    return SupplierTransportHTTP(
        base_url=settings.supplier_base_url,
        timeout_seconds=settings.supplier_timeout_seconds,
    )


@lru_cache(maxsize=1)
def _use_case_bundle() -> dict[str, Any]:
    settings = get_settings()
    return build_use_cases(
        settings=settings,
        transport=build_transport(settings),
        clock=SystemClock(),
        partner_order_id_generator=RealPartnerOrderIdGenerator(),
    )


def get_use_cases() -> dict[str, Any]:
    return _use_case_bundle()


def get_request_context(
    request: Request,
    user_id: str | None = Header(default=None, alias="X-User-Id"),
    language: str | None = Header(default=None, alias="Accept-Language"),
    settings: Settings = Depends(get_settings),
) -> RequestContext:
    """Contexto ambiente de la solicitud: usuario, IP del cliente e idioma."""
    user_ip = request.client.host if request.client else None
    lang = (language or settings.default_language).split(",")[0].split("-")[0].strip()
    if not user_id:
        return RequestContext.anonymous(user_ip=user_ip, language=lang or settings.default_language)
    return RequestContext(user_id=user_id, user_ip=user_ip, language=lang or settings.default_language)
