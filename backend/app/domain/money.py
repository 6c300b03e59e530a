"""Integer-cent money helpers. Display strings only exist at the API edge."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

MoneyInput = Union[int, float, str, Decimal]


def to_cents(value: Optional[MoneyInput]) -> Optional[int]:
    """
    Parse ``"79.99"``, ``"$80"``, ``80`` or ``Decimal("80.5")`` into cents.

    Returns None for None/blank input.

    Raises:
        ValueError: for unparsable or negative amounts
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Invalid money amount")
    if isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace(",", "")
        if not cleaned:
            return None
        value = cleaned
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid money amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid money amount: {value!r}")
    if amount < 0:
        raise ValueError("Money amounts cannot be negative")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: Optional[int]) -> Optional[str]:
    if cents is None:
        return None
    return f"{Decimal(cents) / 100:.2f}"


def apply_discount(cents: int, discount_pct: int) -> int:
    """Price after a whole-percent discount; the discount rounds half up."""
    discount = (cents * discount_pct + 50) // 100
    return cents - discount
