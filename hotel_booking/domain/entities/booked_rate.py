"""Entidad BookedRate - referencia inmutable a una tarifa retenida."""

from dataclasses import dataclass, field

from hotel_booking.domain.constants import DEFAULT_PRICE_INCREASE_PERCENT
from hotel_booking.domain.entities.guest import RoomOccupancy


@dataclass(frozen=True)
class BookedRate:
    """
    Tarifa seleccionada por el usuario y retenida por el proveedor.

    book_hash viene de la búsqueda por hotel (h-...), match_hash de la
    búsqueda por región (m-...). Al menos uno es obligatorio.
    """

    book_hash: str | None = None
    match_hash: str | None = None
    residency: str = "us"
    currency: str = "USD"
    price_increase_percent: int = DEFAULT_PRICE_INCREASE_PERCENT
    occupancy: tuple[RoomOccupancy, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.book_hash and not self.match_hash:
            raise ValueError("BookedRate requiere book_hash o match_hash")

        if not 0 <= self.price_increase_percent <= 100:
            raise ValueError(
                f"price_increase_percent fuera de rango (0-100): {self.price_increase_percent}"
            )

    @property
    def hash(self) -> str:
        return self.book_hash or self.match_hash  # type: ignore[return-value]

    def hash_payload(self) -> dict[str, str]:
        if self.book_hash:
            return {"book_hash": self.book_hash}
        return {"match_hash": self.match_hash}  # type: ignore[dict-item]
