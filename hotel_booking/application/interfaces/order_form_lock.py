from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class OrderFormLock(ABC):
    """Colapsa llamadas concurrentes de OrderForm con el mismo PartnerOrderId."""

    @abstractmethod
    async def run(self, partner_order_id: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Ejecuta `factory` una sola vez por PartnerOrderId.

        Llamadas concurrentes esperan el mismo resultado; un resultado exitoso
        queda en caché durante el TTL configurado.
        """
        raise NotImplementedError

    @abstractmethod
    def clear(self, partner_order_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_all(self) -> int:
        raise NotImplementedError
