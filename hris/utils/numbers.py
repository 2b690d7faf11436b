"""
HRIS Console - Number Coercion

Backend amounts arrive as numbers, numeric strings, blanks or garbage.
Display arithmetic treats every unusable value as zero.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def safe_number(value: Any) -> Decimal:
    """Coerce anything to a finite Decimal, falling back to 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return number if number.is_finite() else ZERO
