"""
Domain numeric helpers (pure).

Values coming from the backend may be numbers, numeric strings or null. The
domain works in Decimal; missing values count as zero in every aggregate.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional


def optional_decimal(value: object) -> Optional[Decimal]:
    """Convert a backend value to Decimal, keeping None/empty as None."""

    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric value")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc


def decimal_or_zero(value: object) -> Decimal:
    converted = optional_decimal(value)
    return converted if converted is not None else Decimal("0")


def decimal_to_json(value: Optional[Decimal]) -> Optional[str]:
    """Numeric columns are sent to Supabase as strings to keep full precision."""

    if value is None:
        return None
    return str(value)
