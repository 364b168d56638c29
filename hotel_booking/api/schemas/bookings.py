from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

PaymentType = Literal["deposit", "hotel", "now"]


# === Requests ===


class GuestSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: str
    last_name: str
    is_child: bool = False
    age: int | None = Field(default=None, ge=0, le=17)


class OccupancySchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    adults: int = Field(ge=1)
    children: list[int] = Field(default_factory=list)


class RateSelection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    book_hash: str | None = None
    match_hash: str | None = None
    residency: str = "us"
    price_increase_percent: int = Field(default=20, ge=0, le=100)

    @model_validator(mode="after")
    def _require_hash(self) -> "RateSelection":
        if not self.book_hash and not self.match_hash:
            raise ValueError("book_hash or match_hash is required")
        return self


class PrebookRequest(RateSelection):
    currency: str = Field(default="USD", min_length=3, max_length=3)


class MultiroomPrebookRoom(RateSelection):
    guests: list[OccupancySchema] = Field(min_length=1)


class MultiroomPrebookRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rooms: list[MultiroomPrebookRoom] = Field(min_length=1)
    currency: str = Field(default="USD", min_length=3, max_length=3)


class OrderFormRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    book_hash: str = Field(min_length=1)
    partner_order_id: str | None = Field(default=None, max_length=64)


class MultiroomOrderFormRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    book_hashes: list[str] = Field(min_length=1)
    partner_order_id: str | None = Field(default=None, max_length=64)


class OrderFinishRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    order_id: str
    item_id: str
    partner_order_id: str
    email: EmailStr
    payment_type: PaymentType = "deposit"
    payment_amount: str = ""
    payment_currency_code: str = "USD"
    guests: list[GuestSchema] = Field(min_length=1)
    phone: str | None = None


class MultiroomFinishRoomSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    order_id: str
    item_id: str
    guests: list[GuestSchema] = Field(min_length=1)


class MultiroomFinishRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rooms: list[MultiroomFinishRoomSchema] = Field(min_length=1)
    partner_order_id: str
    email: EmailStr
    payment_type: PaymentType = "deposit"
    payment_amount: str = ""
    payment_currency_code: str = "USD"
    phone: str | None = None
    upsell_data: list[Any] = Field(default_factory=list)


class PollRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_attempts: int | None = Field(default=None, ge=1, le=60)
    interval_seconds: float | None = Field(default=None, ge=0, le=30)


class MultiroomPollRequest(PollRequest):
    order_ids: list[str] = Field(min_length=1)


class CancelRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: str | None = None


# === Responses ===


class PriceSchema(BaseModel):
    amount: str
    currency_code: str


class FailedRoomSchema(BaseModel):
    room_index: int
    error: str
    code: str
    book_hash: str | None = None


class PrebookResponse(BaseModel):
    book_hash: str
    price: PriceSchema | None = None
    price_changed: bool = False
    original_price: PriceSchema | None = None


class PrebookedRoomResponse(BaseModel):
    room_index: int
    book_hash: str
    original_hash: str | None = None
    price: PriceSchema | None = None
    price_changed: bool = False


class MultiroomPrebookResponse(BaseModel):
    rooms: list[PrebookedRoomResponse]
    failed: list[FailedRoomSchema] = Field(default_factory=list)
    total_rooms: int
    successful_rooms: int
    failed_rooms: int


class OrderFormResponse(BaseModel):
    """`_recovered=True`: orden recuperada, campos y precio desconocidos."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str
    item_id: str
    partner_order_id: str
    required_fields: list[dict[str, Any]] = Field(default_factory=list)
    rooms: list[dict[str, Any]] = Field(default_factory=list)
    payment_types: list[dict[str, Any]] = Field(default_factory=list)
    payment_types_available: list[str] = Field(default_factory=list)
    final_price: PriceSchema
    recovered: bool = Field(default=False, alias="_recovered")


class MultiroomOrderFormResponse(BaseModel):
    partner_order_id: str
    rooms: list[OrderFormResponse]
    failed: list[FailedRoomSchema] = Field(default_factory=list)
    total_rooms: int
    successful_rooms: int
    failed_rooms: int
    recovered: bool = False


class OrderFinishResponse(BaseModel):
    order_id: str
    partner_order_id: str
    status: str | None = None


class MultiroomFinishResponse(BaseModel):
    partner_order_id: str
    order_ids: list[str]
    failed: list[FailedRoomSchema] = Field(default_factory=list)
    total_rooms: int
    successful_rooms: int
    failed_rooms: int


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str | None
    is_terminal: bool
    error_code: str | None = None
    message: str | None = None


class MultiroomPollResponse(BaseModel):
    statuses: dict[str, OrderStatusResponse]
    pending_order_ids: list[str]
    complete: bool


class PartnerOrderIdResponse(BaseModel):
    partner_order_id: str
