"""Value Object Money - representa un valor monetario con su moneda."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any


@dataclass(frozen=True)
class Money:
    """
    Value Object inmutable que representa un monto monetario.

    Attributes:
        amount: Monto decimal.
        currency_code: Código ISO 4217 de la moneda (ej: USD, EUR).
    """

    amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except InvalidOperation as exc:
                raise ValueError(f"amount inválido: {self.amount!r}") from exc

        if len(self.currency_code) != 3:
            raise ValueError(f"currency_code debe ser de 3 caracteres: {self.currency_code}")

        if self.amount < 0:
            raise ValueError(f"amount no puede ser negativo: {self.amount}")

    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            raise TypeError(f"No se puede sumar Money con {type(other)}")
        if self.currency_code != other.currency_code:
            raise ValueError(
                f"No se pueden sumar montos de diferentes monedas: "
                f"{self.currency_code} vs {other.currency_code}"
            )
        return Money(amount=self.amount + other.amount, currency_code=self.currency_code)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"

    def as_payload(self) -> dict[str, str]:
        """Formato usado por el proveedor: {"amount": "199.00", "currency_code": "USD"}."""
        return {"amount": f"{self.amount:.2f}", "currency_code": self.currency_code}

    @classmethod
    def zero(cls, currency_code: str = "USD") -> "Money":
        """Crea un Money con valor cero."""
        return cls(amount=Decimal("0"), currency_code=currency_code)

    @classmethod
    def from_payload(cls, payload: Any, default_currency: str = "USD") -> "Money | None":
        """
        Lee un precio del proveedor.

        Acepta {"amount", "currency_code"} o {"amount", "currency"}; devuelve
        None si el payload no trae un monto utilizable.
        """
        if not isinstance(payload, dict) or payload.get("amount") in (None, ""):
            return None
        currency = payload.get("currency_code") or payload.get("currency") or default_currency
        try:
            return cls(amount=Decimal(str(payload["amount"])), currency_code=str(currency))
        except (InvalidOperation, ValueError):
            return None
