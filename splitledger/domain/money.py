"""Pure functions for exact money arithmetic.

This module contains the functional core for money handling:
- No I/O operations
- No side effects
- Integer minor units only, never floats

Precision is the number of fractional digits of the currency (2 for HKD,
USD; 0 for JPY). It only matters when converting to and from text.
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from splitledger.domain.errors import InvalidAmountError
from splitledger.domain.models import Money

DEFAULT_PRECISION = 2


def divide_money(amount: Money, count: int) -> tuple[Money, Money]:
    """Divide an amount into equal shares.

    Args:
        amount: Amount in minor units.
        count: Number of shares.

    Returns:
        Tuple of (share, remainder). The share is rounded toward zero and the
        remainder carries the sign of ``amount``, so
        ``share * count + remainder == amount``.

    Raises:
        ValueError: If count is not positive.
    """
    if count <= 0:
        raise ValueError(f"Cannot divide money into {count} shares")

    share, remainder = divmod(abs(amount), count)
    if amount < 0:
        return Money(-share), Money(-remainder)
    return Money(share), Money(remainder)


def money_sign(amount: Money) -> int:
    """Return -1, 0 or 1 according to the sign of the amount."""
    return (amount > 0) - (amount < 0)


def sum_money(amounts: Iterable[Money]) -> Money:
    """Sum amounts, returning Money(0) for an empty sequence."""
    return Money(sum(amounts, 0))


def to_decimal(amount: Money, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Convert minor units to a Decimal in major units.

    Args:
        amount: Amount in minor units.
        precision: Fractional digits of the currency.

    Returns:
        Exact Decimal value (e.g. 1234 -> Decimal("12.34")).
    """
    return Decimal(amount).scaleb(-precision)


def parse_money(text: str | int | Decimal, precision: int = DEFAULT_PRECISION) -> Money:
    """Parse a decimal amount into minor units without rounding.

    Args:
        text: Amount such as "12.50", "$1,234.5" or 12.
        precision: Fractional digits of the currency.

    Returns:
        Amount in minor units.

    Raises:
        InvalidAmountError: If the text is not a number or has more
            fractional digits than the currency allows.
    """
    if isinstance(text, Decimal):
        value = text
    else:
        cleaned = str(text).strip().replace(",", "").replace("_", "")
        cleaned = cleaned.replace("HK$", "").lstrip("$£€¥")
        try:
            value = Decimal(cleaned)
        except InvalidOperation as e:
            raise InvalidAmountError(f"Not a valid amount: '{text}'") from e

    if not value.is_finite():
        raise InvalidAmountError(f"Not a valid amount: '{text}'")

    minor = value.scaleb(precision)
    if minor != minor.to_integral_value():
        raise InvalidAmountError(f"Amount '{text}' has more than {precision} decimal places")

    return Money(int(minor))


def format_money(
    amount: Money,
    precision: int = DEFAULT_PRECISION,
    symbol: str = "",
    include_sign: bool = False,
) -> str:
    """Format money amount for display.

    Args:
        amount: Amount in minor units.
        precision: Fractional digits of the currency.
        symbol: Currency symbol to prefix (e.g. "$").
        include_sign: Whether to include + for positive amounts.

    Returns:
        Formatted string (e.g., "-$1,234.50" or "+$3.00").
    """
    formatted = f"{symbol}{to_decimal(abs(amount), precision):,.{precision}f}"

    if amount < 0:
        return f"-{formatted}"
    if include_sign and amount > 0:
        return f"+{formatted}"
    return formatted
