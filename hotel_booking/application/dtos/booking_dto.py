"""DTOs para el flujo de reserva (prebook -> order form -> finish -> status)."""

import uuid
from dataclasses import dataclass, field
from typing import Any

from hotel_booking.domain.entities.guest import Guest
from hotel_booking.domain.entities.multiroom import MultiroomBatch
from hotel_booking.domain.entities.order import OrderStatusSnapshot
from hotel_booking.domain.value_objects.money import Money


@dataclass(frozen=True)
class RequestContext:
    """
    Contexto ambiente que viaja explícito por cada paso del flujo.

    Reemplaza los helpers globales (id de usuario, IP) del cliente web.
    """

    user_id: str
    user_ip: str | None = None
    language: str = "en"

    @classmethod
    def anonymous(cls, user_ip: str | None = None, language: str = "en") -> "RequestContext":
        return cls(user_id=f"anon_{uuid.uuid4()}", user_ip=user_ip, language=language)


@dataclass
class PrebookResult:
    """Resultado de Prebook: hash confirmado (p-...) y precio confirmado."""

    book_hash: str
    price: Money | None = None
    price_changed: bool = False
    original_price: Money | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class PrebookedRoom:
    room_index: int
    book_hash: str
    original_hash: str | None = None
    price: Money | None = None
    price_changed: bool = False


@dataclass
class MultiroomPrebookResult:
    batch: MultiroomBatch
    rooms: list[PrebookedRoom] = field(default_factory=list)

    @property
    def book_hashes(self) -> list[str]:
        return [room.book_hash for room in self.rooms]


@dataclass
class OrderFormResult:
    """
    Resultado de OrderForm.

    Si `recovered` es True el resultado fue sintetizado a partir de una orden
    ya existente: required_fields/rooms vienen vacíos y final_price es un
    placeholder en cero. No debe usarse para volver a pintar el formulario.
    """

    order_id: str
    item_id: str
    partner_order_id: str
    required_fields: list[dict[str, Any]] = field(default_factory=list)
    rooms: list[dict[str, Any]] = field(default_factory=list)
    payment_types: list[dict[str, Any]] = field(default_factory=list)
    payment_types_available: list[str] = field(default_factory=list)
    final_price: Money = field(default_factory=Money.zero)
    recovered: bool = False
    room_index: int = 0
    raw: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "item_id": self.item_id,
            "partner_order_id": self.partner_order_id,
            "required_fields": self.required_fields,
            "rooms": self.rooms,
            "payment_types": self.payment_types,
            "payment_types_available": self.payment_types_available,
            "final_price": self.final_price.as_payload(),
            "_recovered": self.recovered,
        }


@dataclass
class MultiroomOrderFormResult:
    partner_order_id: str
    batch: MultiroomBatch
    forms: list[OrderFormResult] = field(default_factory=list)
    recovered: bool = False


@dataclass
class RecoveredOrder:
    """Orden encontrada por el Recovery Resolver vía consulta batch."""

    order_id: str
    item_id: str
    payment_types: list[dict[str, Any]] = field(default_factory=list)
    status: str | None = None


@dataclass
class OrderFinishRequest:
    order_id: str
    item_id: str
    partner_order_id: str
    email: str
    payment_type: str = "deposit"
    payment_amount: str = ""
    payment_currency_code: str = "USD"
    guests: list[Guest] = field(default_factory=list)
    phone: str | None = None


@dataclass
class MultiroomFinishRoom:
    order_id: str
    item_id: str
    guests: list[Guest] = field(default_factory=list)


@dataclass
class MultiroomFinishRequest:
    rooms: list[MultiroomFinishRoom]
    partner_order_id: str
    email: str
    payment_type: str = "deposit"
    payment_amount: str = ""
    payment_currency_code: str = "USD"
    phone: str | None = None
    upsell_data: list[Any] = field(default_factory=list)


@dataclass
class OrderFinishResult:
    order_id: str
    partner_order_id: str
    status: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class MultiroomFinishResult:
    partner_order_id: str
    batch: MultiroomBatch
    order_ids: list[str] = field(default_factory=list)


@dataclass
class BookingOutcome:
    """
    Resultado del flujo completo de una habitación.

    status_unknown=True significa que el polling agotó sus intentos: la
    reserva puede seguir procesándose, no es un fallo.
    """

    partner_order_id: str
    prebook: PrebookResult
    order_form: OrderFormResult
    finish: OrderFinishResult
    status: OrderStatusSnapshot | None = None
    status_unknown: bool = False


@dataclass
class MultiroomBookingOutcome:
    partner_order_id: str
    prebook: MultiroomPrebookResult
    order_form: MultiroomOrderFormResult
    finish: MultiroomFinishResult
    statuses: dict[str, OrderStatusSnapshot] = field(default_factory=dict)
    pending_order_ids: list[str] = field(default_factory=list)
