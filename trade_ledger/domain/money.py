"""Money value type and currency conversion boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from .errors import CurrencyConversionError


@dataclass(frozen=True)
class Money:
    """Decimal amount in one currency.

    Attributes:
        currency_code: ISO-4217 currency code.
        amount: Decimal amount.
    """

    currency_code: str
    amount: Decimal

    @classmethod
    def of(cls, currency_code: str, amount: Decimal | str | int) -> "Money":
        """Build money from a decimal-compatible value.

        Args:
            currency_code: ISO-4217 currency code.
            amount: Decimal, string, or integer amount. Floats are rejected.

        Returns:
            Money: Immutable money value.

        Raises:
            ValueError: Raised when currency code is blank or amount is a float.
        """

        if isinstance(amount, float):
            raise ValueError("money amounts must not be built from binary floats")
        normalized_currency_code = currency_code.strip().upper()
        if not normalized_currency_code:
            raise ValueError("currency_code must not be blank")
        return cls(currency_code=normalized_currency_code, amount=Decimal(amount))

    @classmethod
    def zero(cls, currency_code: str) -> "Money":
        return cls.of(currency_code, Decimal("0"))

    def add(self, other: "Money") -> "Money":
        """Return the sum of two amounts in the same currency.

        Raises:
            ValueError: Raised when currencies differ.
        """

        if other.currency_code != self.currency_code:
            raise ValueError(f"cannot add {other.currency_code} to {self.currency_code}")
        return Money(currency_code=self.currency_code, amount=self.amount + other.amount)

    def subtract(self, other: "Money") -> "Money":
        if other.currency_code != self.currency_code:
            raise ValueError(f"cannot subtract {other.currency_code} from {self.currency_code}")
        return Money(currency_code=self.currency_code, amount=self.amount - other.amount)

    def multiply(self, factor: Decimal, quantum: Decimal) -> "Money":
        """Scale the amount and round it to the given quantum.

        Args:
            factor: Decimal multiplier.
            quantum: Rounding quantum, e.g. `Decimal("0.01")`.

        Returns:
            Money: Scaled money rounded half-up.
        """

        scaled_amount = (self.amount * factor).quantize(quantum, rounding=ROUND_HALF_UP)
        return Money(currency_code=self.currency_code, amount=scaled_amount)

    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    def __str__(self) -> str:
        return f"{self.currency_code} {self.amount}"


class CurrencyConverterPort(Protocol):
    """Port definition for expressing money in a term currency."""

    def money_convert(self, money: Money, at: datetime, term_currency: str) -> Money:
        """Convert money into the term currency.

        Args:
            money: Source amount.
            at: Valuation timestamp.
            term_currency: Target ISO-4217 currency code.

        Returns:
            Money: Amount expressed in `term_currency`.

        Raises:
            CurrencyConversionError: Raised when no rate is available.
        """


class IdentityCurrencyConverter:
    """Converter that only accepts amounts already in the term currency."""

    def money_convert(self, money: Money, at: datetime, term_currency: str) -> Money:
        """Return money unchanged when currencies match.

        Raises:
            CurrencyConversionError: Raised when currencies differ.
        """

        _ = at
        if money.currency_code != term_currency.strip().upper():
            raise CurrencyConversionError(
                f"no exchange rate configured for {money.currency_code}->{term_currency}"
            )
        return money


class FixedRateCurrencyConverter:
    """Converter backed by a static `(from, to) -> rate` table."""

    def __init__(self, rates: dict[tuple[str, str], Decimal], amount_quantum: Decimal = Decimal("0.01")):
        """Initialize static conversion table.

        Args:
            rates: Rates keyed by `(from_currency, to_currency)`.
            amount_quantum: Rounding quantum for converted amounts.

        Raises:
            ValueError: Raised when a rate is not positive.
        """

        normalized_rates: dict[tuple[str, str], Decimal] = {}
        for (from_currency, to_currency), rate in rates.items():
            rate_value = Decimal(rate)
            if rate_value <= Decimal("0"):
                raise ValueError(f"exchange rate {from_currency}->{to_currency} must be positive")
            normalized_rates[(from_currency.strip().upper(), to_currency.strip().upper())] = rate_value
        self._rates = normalized_rates
        self._amount_quantum = amount_quantum

    def money_convert(self, money: Money, at: datetime, term_currency: str) -> Money:
        """Convert with the configured static rate; the timestamp is ignored."""

        _ = at
        normalized_term_currency = term_currency.strip().upper()
        if money.currency_code == normalized_term_currency:
            return money

        direct_rate = self._rates.get((money.currency_code, normalized_term_currency))
        if direct_rate is not None:
            converted = money.multiply(direct_rate, self._amount_quantum)
            return Money(currency_code=normalized_term_currency, amount=converted.amount)

        inverse_rate = self._rates.get((normalized_term_currency, money.currency_code))
        if inverse_rate is not None:
            converted = money.multiply(Decimal("1") / inverse_rate, self._amount_quantum)
            return Money(currency_code=normalized_term_currency, amount=converted.amount)

        raise CurrencyConversionError(
            f"no exchange rate configured for {money.currency_code}->{normalized_term_currency}"
        )


__all__ = [
    "CurrencyConversionError",
    "CurrencyConverterPort",
    "FixedRateCurrencyConverter",
    "IdentityCurrencyConverter",
    "Money",
]
