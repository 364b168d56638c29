"""Entidades de huéspedes y ocupación por habitación."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Guest:
    """Huésped enviado en OrderFinish."""

    first_name: str
    last_name: str
    is_child: bool = False
    age: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "is_child": self.is_child,
        }
        if self.age is not None:
            payload["age"] = self.age
        return payload


@dataclass(frozen=True)
class RoomOccupancy:
    """Ocupación de una habitación (adultos + edades de niños) para multiroom."""

    adults: int
    children: tuple[int, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, Any]:
        return {"adults": self.adults, "children": list(self.children)}
