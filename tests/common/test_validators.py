from __future__ import annotations

from decimal import Decimal

import pytest

from src.lateness_system.lateness_system.common.validators import (
    require_int,
    require_non_empty,
    require_non_negative_decimal,
    require_non_negative_int,
)
from src.lateness_system.lateness_system.core.constants import MAX_INT_COLUMN
from src.lateness_system.lateness_system.core.exceptions import InvalidConfig, ValidationError


def test_require_int_keeps_large_integers_exact():
    big = 2**53 + 1
    assert require_int(big, "n") == big
    assert require_int(str(big), "n") == big
    assert require_int(" 7 ", "n") == 7
    assert require_int("7.0", "n") == 7


@pytest.mark.parametrize("value", [None, True, "", "7.5", 7.5, "abc", "nan", "inf"])
def test_require_int_rejects_non_integers(value):
    with pytest.raises(ValidationError) as exc:
        require_int(value, "n")
    assert exc.value.field == "n"


def test_non_negative_int_respects_column_maximum():
    assert require_non_negative_int(MAX_INT_COLUMN, "tier", maximum=MAX_INT_COLUMN) == MAX_INT_COLUMN
    with pytest.raises(InvalidConfig) as exc:
        require_non_negative_int(MAX_INT_COLUMN + 1, "tier", maximum=MAX_INT_COLUMN)
    assert exc.value.field == "tier"


def test_decimal_places_are_not_rounded_away():
    assert require_non_negative_decimal("1.10", "x", places=2) == Decimal("1.10")
    assert require_non_negative_decimal("1E+2", "x", places=2) == Decimal("100")
    with pytest.raises(InvalidConfig) as exc:
        require_non_negative_decimal("1.105", "x", places=2)
    assert "decimal places" in str(exc.value)
    with pytest.raises(InvalidConfig):
        require_non_negative_decimal("100.01", "x", maximum=Decimal("100"))


def test_require_non_empty_length_limit():
    assert require_non_empty("  abc ", "name", max_length=3) == "abc"
    with pytest.raises(ValidationError) as exc:
        require_non_empty("abcd", "name", max_length=3)
    assert exc.value.field == "name"
