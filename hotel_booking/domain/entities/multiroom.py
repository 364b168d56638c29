"""Entidades para reservas multiroom (varias habitaciones en un mismo viaje)."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class FailedRoom:
    """Habitación que falló dentro de un lote multiroom."""

    room_index: int
    error: str
    code: str
    book_hash: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "FailedRoom":
        return cls(
            room_index=int(payload.get("roomIndex", payload.get("room_index", -1))),
            error=str(payload.get("error") or payload.get("message") or ""),
            code=str(payload.get("code") or "unknown"),
            book_hash=payload.get("book_hash"),
        )


@dataclass
class MultiroomBatch:
    """
    Lote ordenado de habitaciones con contadores agregados.

    Cada habitación avanza de forma independiente; los fallos son parciales.
    """

    rooms: list[dict[str, Any]] = field(default_factory=list)
    failed: list[FailedRoom] = field(default_factory=list)
    total_rooms: int = 0
    successful_rooms: int = 0
    failed_rooms: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_partial(self) -> bool:
        return 0 < self.successful_rooms < self.total_rooms

    @property
    def all_failed(self) -> bool:
        return self.total_rooms > 0 and self.successful_rooms == 0

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "MultiroomBatch":
        rooms = list(data.get("rooms") or [])
        failed = [FailedRoom.from_payload(item) for item in data.get("failed") or []]
        total = int(data.get("total_rooms", len(rooms) + len(failed)))
        successful = int(data.get("successful_rooms", len(rooms)))
        failed_count = int(data.get("failed_rooms", len(failed)))
        known = {"rooms", "failed", "total_rooms", "successful_rooms", "failed_rooms"}
        return cls(
            rooms=rooms,
            failed=failed,
            total_rooms=total,
            successful_rooms=successful,
            failed_rooms=failed_count,
            extra={key: value for key, value in data.items() if key not in known},
        )
