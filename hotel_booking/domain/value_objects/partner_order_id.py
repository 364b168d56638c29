"""Value Object PartnerOrderId - clave de idempotencia de un intento de reserva."""

import secrets
import string
import time
from dataclasses import dataclass


@dataclass(frozen=True)
class PartnerOrderId:
    """
    Identificador generado por el cliente para un intento de reserva.

    Se reutiliza en todos los reintentos de OrderForm/OrderFinish del mismo
    intento y nunca entre dos intentos distintos.

    Formato generado: BK-<epoch millis>-<6 alfanuméricos en mayúsculas>.
    """

    value: str

    PREFIX = "BK"
    SUFFIX_LENGTH = 6
    ALLOWED_CHARS = string.ascii_uppercase + string.digits
    MAX_LENGTH = 64

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("partner_order_id no puede estar vacío")

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(f"partner_order_id excede {self.MAX_LENGTH} caracteres: {len(self.value)}")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, now_ms: int | None = None) -> "PartnerOrderId":
        """Genera un id nuevo con timestamp + sufijo aleatorio."""
        timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
        suffix = "".join(secrets.choice(cls.ALLOWED_CHARS) for _ in range(cls.SUFFIX_LENGTH))
        return cls(value=f"{cls.PREFIX}-{timestamp}-{suffix}")
