from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import InvalidConfig, ValidationError


def require_non_empty(value: Optional[str], field_name: str, *, max_length: Optional[int] = None) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    text = str(value).strip()
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters", field=field_name)
    return text


def require_int(value: Any, field_name: str) -> int:
    # Parsed through Decimal so large integers keep every digit.
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    return int(number)


def require_non_negative_int(value: Any, field_name: str, *, maximum: Optional[int] = None) -> int:
    number = require_int(value, field_name)
    if number < 0:
        raise InvalidConfig(f"{field_name} must not be negative", field=field_name)
    if maximum is not None and number > maximum:
        raise InvalidConfig(f"{field_name} must not exceed {maximum}", field=field_name)
    return number


def require_decimal(value: Any, field_name: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    return number


def require_non_negative_decimal(
    value: Any,
    field_name: str,
    *,
    maximum: Optional[Decimal] = None,
    places: Optional[int] = None,
) -> Decimal:
    """Decimal >= 0, optionally capped and limited to ``places`` fractional digits.

    Values the storage column would round or reject are refused here instead.
    """

    number = require_decimal(value, field_name)
    if number < 0:
        raise InvalidConfig(f"{field_name} must not be negative", field=field_name)
    if maximum is not None and number > maximum:
        raise InvalidConfig(f"{field_name} must not exceed {maximum}", field=field_name)
    if places is not None and number != number.quantize(Decimal(1).scaleb(-places)):
        raise InvalidConfig(f"{field_name} must have at most {places} decimal places", field=field_name)
    return number
