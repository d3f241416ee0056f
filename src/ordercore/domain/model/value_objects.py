"""Value Objects: Money and Quantity.

Both are frozen and validate on construction, so an order line can never
carry a negative price or a zero quantity.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ordercore.domain.exceptions import ValidationError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount in one currency.

    Prices, line subtotals and order totals are all Money.  Amounts are
    never floats; ``Money.of`` refuses them outright.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    @staticmethod
    def of(amount: str | int | Decimal) -> Money:
        """Build Money from user input such as ``"15.00"`` or ``15``."""
        if isinstance(amount, float):
            raise ValidationError(f"Money amount must not be a float: {amount!r}")
        try:
            return Money(Decimal(str(amount)))
        except InvalidOperation as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = "USD") -> Money:
        return Money(Decimal("0.00"), currency)

    def __add__(self, other: Money) -> Money:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, quantity: int) -> Money:
        # Line subtotals only; fractional factors go through scale().
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError(f"Can only multiply Money by int, got {type(quantity).__name__}")
        return Money(self.amount * quantity, self.currency)

    def scale(self, multiplier: Decimal) -> Money:
        """Multiply by a positive Decimal, rounding half-up to the cent.

        ``Money.of("19.99").scale(Decimal("0.85"))`` is ``16.99``.
        """
        if not isinstance(multiplier, Decimal):
            raise ValidationError(
                f"Multiplier must be a Decimal, got {type(multiplier).__name__}"
            )
        if multiplier <= 0:
            raise ValidationError("Price multiplier must be positive")
        return Money((self.amount * multiplier).quantize(CENT, ROUND_HALF_UP), self.currency)

    def __str__(self) -> str:
        return f"${self.amount:.2f}"


@dataclass(frozen=True)
class Quantity:
    """Units of one product on an order line; always a positive int."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
