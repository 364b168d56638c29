"""Interface PartnerOrderIdGenerator - Puerto para generar claves de idempotencia."""

import time
from abc import ABC, abstractmethod

from hotel_booking.domain.value_objects.partner_order_id import PartnerOrderId


class PartnerOrderIdGenerator(ABC):
    """
    Puerto para generación de PartnerOrderId.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def generate(self) -> PartnerOrderId:
        raise NotImplementedError


class RealPartnerOrderIdGenerator(PartnerOrderIdGenerator):
    """Timestamp en milisegundos + sufijo aleatorio de `secrets`."""

    def generate(self) -> PartnerOrderId:
        return PartnerOrderId.generate(now_ms=int(time.time() * 1000))


class FakePartnerOrderIdGenerator(PartnerOrderIdGenerator):
    """
    Implementación fake para testing.

    Genera valores predecibles: BK-TEST-000001, BK-TEST-000002, ...
    """

    def __init__(self, prefix: str = "TEST"):
        self._prefix = prefix
        self._counter = 0

    def generate(self) -> PartnerOrderId:
        self._counter += 1
        return PartnerOrderId(value=f"BK-{self._prefix}-{self._counter:06d}")

    def reset(self) -> None:
        self._counter = 0
