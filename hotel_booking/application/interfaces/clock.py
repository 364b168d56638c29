"""Interface Clock - Puerto para abstracción de tiempo y esperas."""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Puerto para abstracción del tiempo del sistema.

    Todas las esperas del flujo (backoff, reintento de prebook, intervalos de
    polling) pasan por sleep() para poder inyectar un reloj fake en tests.
    """

    @abstractmethod
    def now(self) -> datetime:
        """
        Retorna la fecha/hora actual.

        Returns:
            datetime con la hora actual (timezone-aware UTC).
        """
        raise NotImplementedError

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspende al llamador durante `seconds` segundos."""
        raise NotImplementedError


class SystemClock(Clock):
    """Implementación real que usa el reloj del sistema y asyncio.sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class FakeClock(Clock):
    """
    Implementación fake para testing.

    sleep() no espera: registra la duración pedida y avanza el tiempo virtual.
    """

    def __init__(self, fixed_time: datetime | None = None):
        """
        Inicializa el clock con un tiempo fijo opcional.

        Args:
            fixed_time: Tiempo inicial. Si es None, usa el tiempo real actual.
        """
        self._fixed_time = fixed_time or datetime.now(timezone.utc)
        self._start = self._fixed_time
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._fixed_time

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._fixed_time = self._fixed_time + timedelta(seconds=seconds)
        # cede el control para que otras tareas avancen
        await asyncio.sleep(0)

    @property
    def elapsed_seconds(self) -> float:
        return (self._fixed_time - self._start).total_seconds()

    def advance(self, seconds: float = 0) -> None:
        self._fixed_time = self._fixed_time + timedelta(seconds=seconds)
