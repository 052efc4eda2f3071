from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import (
    require_non_empty,
    require_non_negative_decimal,
    require_non_negative_int,
)
from ..core.constants import MAX_ID_LENGTH, MAX_INT_COLUMN, MAX_PERCENT, MONEY_PLACES
from ..core.exceptions import InvalidConfig


@dataclass(frozen=True)
class DeductionTier:
    """Thực thể miền (domain): một bậc khấu trừ theo khoảng phút đi muộn.

    ``teacher_id`` None means the Global scope. ``end_minute`` None means
    Unlimited. Both range ends are inclusive.
    """

    tier_id: Optional[int]
    teacher_id: Optional[str]
    tier: int
    excused_threshold: int
    start_minute: int
    end_minute: Optional[int]
    deduction_percent: Decimal

    def __post_init__(self):
        for attr, field_name in (
            ("tier", "tier"),
            ("excused_threshold", "excusedThreshold"),
            ("start_minute", "startMinute"),
        ):
            if getattr(self, attr) < 0:
                raise InvalidConfig(f"{field_name} must not be negative", field=field_name)
        if self.end_minute is not None:
            if self.end_minute < 0:
                raise InvalidConfig("endMinute must not be negative", field="endMinute")
            if self.end_minute < self.start_minute:
                raise InvalidConfig("endMinute must not be before startMinute", field="endMinute")
        if self.deduction_percent < 0:
            raise InvalidConfig("deductionPercent must not be negative", field="deductionPercent")

    @property
    def is_global(self) -> bool:
        return self.teacher_id is None

    @property
    def is_unlimited(self) -> bool:
        return self.end_minute is None

    def contains(self, minutes: int) -> bool:
        if minutes < self.start_minute:
            return False
        return self.end_minute is None or minutes <= self.end_minute

    def overlaps(self, other: "DeductionTier") -> bool:
        self_end = float("inf") if self.end_minute is None else self.end_minute
        other_end = float("inf") if other.end_minute is None else other.end_minute
        return self.start_minute <= other_end and other.start_minute <= self_end

    def with_id(self, tier_id: int) -> "DeductionTier":
        return DeductionTier(
            tier_id=int(tier_id),
            teacher_id=self.teacher_id,
            tier=self.tier,
            excused_threshold=self.excused_threshold,
            start_minute=self.start_minute,
            end_minute=self.end_minute,
            deduction_percent=self.deduction_percent,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, tier_id: Optional[int] = None) -> "DeductionTier":
        """Build a tier from an admin payload (camelCase keys, as the UI sends them).

        ``isUnlimited`` or a missing/empty ``endMinute`` makes the tier Unlimited.
        ``isGlobal`` or an empty ``teacherId`` puts it in the Global scope.
        """

        teacher_id = data.get("teacherId")
        if data.get("isGlobal") or teacher_id is None or not str(teacher_id).strip():
            teacher_id = None
        else:
            teacher_id = require_non_empty(teacher_id, "teacherId", max_length=MAX_ID_LENGTH)

        end_raw = data.get("endMinute")
        if data.get("isUnlimited") or end_raw is None or str(end_raw).strip() == "":
            end_minute = None
        else:
            end_minute = require_non_negative_int(end_raw, "endMinute", maximum=MAX_INT_COLUMN)

        return cls(
            tier_id=tier_id,
            teacher_id=teacher_id,
            tier=require_non_negative_int(data.get("tier"), "tier", maximum=MAX_INT_COLUMN),
            excused_threshold=require_non_negative_int(
                data.get("excusedThreshold", 0), "excusedThreshold", maximum=MAX_INT_COLUMN
            ),
            start_minute=require_non_negative_int(data.get("startMinute"), "startMinute", maximum=MAX_INT_COLUMN),
            end_minute=end_minute,
            deduction_percent=require_non_negative_decimal(
                data.get("deductionPercent"), "deductionPercent", maximum=MAX_PERCENT, places=MONEY_PLACES
            ),
        )
