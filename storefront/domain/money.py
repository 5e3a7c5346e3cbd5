"""Money helpers.

Amounts travel through the core as integer cents. Decimal strings and
2-decimal floats only exist at the edges (seed data in, JSON out).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CENT = Decimal("0.01")


def to_cents(amount: Decimal | str | int | float) -> int:
    """Convert a currency amount to integer cents.

    Floats are routed through ``str`` first so ``0.1`` becomes exactly 10.

    Raises:
        ValueError: If the amount cannot be parsed.

    Examples:
        >>> to_cents("5.99")
        599
        >>> to_cents(0.1)
        10
    """
    if isinstance(amount, bool):
        raise ValueError(f"Invalid amount: {amount!r}")
    if isinstance(amount, float):
        amount = repr(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int) -> str:
    """Render cents as a fixed 2-decimal string, e.g. ``30 -> "0.30"``."""

    return str((Decimal(cents) / 100).quantize(_CENT))


def cents_to_amount(cents: int) -> float:
    """Render cents as a number rounded to 2 decimal places for JSON output."""

    return float(format_cents(cents))


def line_total_cents(unit_price_cents: int, quantity: int) -> int:
    return unit_price_cents * quantity
