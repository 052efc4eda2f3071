from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Tuple

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty
from ..core.constants import MAX_ID_LENGTH, MAX_REASON_LENGTH
from ..core.exceptions import ValidationError

# Absence records are not part of the event feed, so only lateness can be waived.
WAIVE_LATENESS = "waive_lateness"


@dataclass(frozen=True)
class DeductionWaiver:
    """Thực thể miền (domain): miễn khấu trừ đi muộn của một giáo viên trong một ngày."""

    waiver_id: Optional[int]
    teacher_id: str
    waiver_date: date
    original_amount: Decimal
    reason: str
    admin_id: Optional[str] = None

    @property
    def key(self) -> Tuple[str, date]:
        return self.teacher_id, self.waiver_date


def _date_field(raw: Any, field_name: str) -> date:
    if raw in (None, ""):
        raise ValidationError(f"{field_name} is required", field=field_name)
    try:
        return parse_iso_date(str(raw))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD", field=field_name)


@dataclass(frozen=True)
class WaiverRequest:
    """Admin payload for preview/apply: which teachers, which days, and why."""

    teacher_ids: Tuple[str, ...]
    start_date: date
    end_date: date
    reason: Optional[str] = None
    admin_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, require_reason: bool = True) -> "WaiverRequest":
        adjustment_type = data.get("adjustmentType") or WAIVE_LATENESS
        if adjustment_type != WAIVE_LATENESS:
            raise ValidationError(f"adjustmentType must be {WAIVE_LATENESS}", field="adjustmentType")

        raw_ids = data.get("teacherIds")
        if not isinstance(raw_ids, list) or not raw_ids:
            raise ValidationError("teacherIds must be a non-empty list", field="teacherIds")
        teacher_ids = tuple(
            dict.fromkeys(require_non_empty(t, "teacherIds", max_length=MAX_ID_LENGTH) for t in raw_ids)
        )

        date_range = data.get("dateRange")
        if not isinstance(date_range, Mapping):
            raise ValidationError("dateRange is required", field="dateRange")
        start = _date_field(date_range.get("startDate"), "startDate")
        end = _date_field(date_range.get("endDate"), "endDate")
        if start > end:
            raise ValidationError("startDate must not be after endDate", field="startDate")

        reason = data.get("reason")
        if require_reason or (reason is not None and str(reason).strip()):
            reason = require_non_empty(reason, "reason", max_length=MAX_REASON_LENGTH)
        else:
            reason = None

        admin_id = data.get("adminId")
        admin_id = require_non_empty(admin_id, "adminId", max_length=MAX_ID_LENGTH) if admin_id else None

        return cls(teacher_ids=teacher_ids, start_date=start, end_date=end, reason=reason, admin_id=admin_id)


@dataclass(frozen=True)
class WaiverPreviewRow:
    """One teacher-day inside the requested window that currently costs something."""

    teacher_id: str
    teacher_name: str
    waiver_date: date
    events: int
    amount: Decimal
    already_waived: bool = False


@dataclass(frozen=True)
class WaiverPreview:
    rows: List[WaiverPreviewRow] = field(default_factory=list)

    @property
    def pending(self) -> List[WaiverPreviewRow]:
        return [r for r in self.rows if not r.already_waived]

    @property
    def total_amount(self) -> Decimal:
        return sum((r.amount for r in self.pending), Decimal("0"))

    @property
    def affected_teachers(self) -> int:
        return len({r.teacher_id for r in self.pending})


@dataclass(frozen=True)
class WaiverResult:
    created: List[DeductionWaiver] = field(default_factory=list)

    @property
    def records_affected(self) -> int:
        return len(self.created)

    @property
    def total_amount_waived(self) -> Decimal:
        return sum((w.original_amount for w in self.created), Decimal("0"))

    @property
    def affected_teachers(self) -> int:
        return len({w.teacher_id for w in self.created})
