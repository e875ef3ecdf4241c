from __future__ import annotations

import math
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as float, or None when missing or non-numeric.

    Booleans are not numbers here even though Python treats them as ints.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def require_amount(value: Any, field_name: str) -> float:
    number = coerce_number(value)
    if number is None:
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def require_int_in_range(value: Any, field_name: str, *, minimum: int, maximum: Optional[int] = None) -> int:
    number = coerce_number(value)
    if number is None or not float(number).is_integer():
        raise ValidationError(f"{field_name} must be a whole number")
    result = int(number)
    if result < minimum or (maximum is not None and result > maximum):
        bound = f"between {minimum} and {maximum}" if maximum is not None else f"at least {minimum}"
        raise ValidationError(f"{field_name} must be {bound}")
    return result


def require_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be true or false")
