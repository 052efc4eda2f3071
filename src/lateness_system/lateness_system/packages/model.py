from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import require_non_empty, require_non_negative_decimal
from ..core.constants import MAX_AMOUNT, MAX_NAME_LENGTH, MONEY_PLACES
from ..core.exceptions import InvalidConfig


def _amount(data: Mapping[str, Any], field_name: str):
    return require_non_negative_decimal(data.get(field_name), field_name, maximum=MAX_AMOUNT, places=MONEY_PLACES)


@dataclass(frozen=True)
class PackageBaseAmount:
    """Thực thể miền (domain): mức khấu trừ gốc (ETB) theo gói học."""

    package_id: Optional[int]
    package_name: str
    lateness_base_amount: Decimal
    absence_base_amount: Decimal

    def __post_init__(self):
        if not self.package_name or not self.package_name.strip():
            raise InvalidConfig("packageName is required", field="packageName")
        if self.lateness_base_amount < 0:
            raise InvalidConfig("latenessBaseAmount must not be negative", field="latenessBaseAmount")
        if self.absence_base_amount < 0:
            raise InvalidConfig("absenceBaseAmount must not be negative", field="absenceBaseAmount")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, package_id: Optional[int] = None) -> "PackageBaseAmount":
        return cls(
            package_id=package_id,
            package_name=require_non_empty(data.get("packageName"), "packageName", max_length=MAX_NAME_LENGTH),
            lateness_base_amount=_amount(data, "latenessBaseAmount"),
            absence_base_amount=_amount(data, "absenceBaseAmount"),
        )


@dataclass(frozen=True)
class EffectiveBaseAmounts:
    """Amounts actually used for a package, after falling back to system defaults."""

    package_name: str
    lateness_base_amount: Decimal
    absence_base_amount: Decimal
    defaulted: bool
