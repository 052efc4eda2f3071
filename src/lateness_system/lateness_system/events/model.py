from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import as_utc, parse_iso_datetime
from ..common.validators import require_non_empty


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class LatenessEvent:
    """One scheduled class and the time it actually started (upstream attendance record)."""

    student_id: str
    teacher_id: str
    controller_id: Optional[str]
    scheduled_time: datetime
    actual_start_time: datetime
    package_name: str = ""
    student_name: Optional[str] = None
    teacher_name: Optional[str] = None
    controller_name: Optional[str] = None

    @property
    def lateness_minutes(self) -> int:
        # Rounded to the nearest minute, half up; early starts count as 0.
        seconds = (as_utc(self.actual_start_time) - as_utc(self.scheduled_time)).total_seconds()
        return max(0, int(math.floor(seconds / 60 + 0.5)))

    @property
    def event_date(self) -> date:
        return as_utc(self.scheduled_time).date()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LatenessEvent":
        """Parse the JSON shape sent by attendance capture (camelCase, ISO-8601 UTC)."""

        return cls(
            student_id=require_non_empty(_optional_str(data.get("studentId")), "studentId"),
            teacher_id=require_non_empty(_optional_str(data.get("teacherId")), "teacherId"),
            controller_id=_optional_str(data.get("controllerId")),
            scheduled_time=parse_iso_datetime(require_non_empty(data.get("scheduledTime"), "scheduledTime")),
            actual_start_time=parse_iso_datetime(require_non_empty(data.get("actualStartTime"), "actualStartTime")),
            package_name=_optional_str(data.get("packageName")) or "",
            student_name=_optional_str(data.get("studentName")),
            teacher_name=_optional_str(data.get("teacherName")),
            controller_name=_optional_str(data.get("controllerName")),
        )
