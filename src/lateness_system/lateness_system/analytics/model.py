from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..core.exceptions import ValidationError
from ..deductions.model import ResolvedDeduction


@dataclass(frozen=True)
class AnalyticsFilter:
    start_date: date
    end_date: date
    controller_id: Optional[str] = None
    teacher_id: Optional[str] = None

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValidationError("from must not be after to", field="from")
        if self.end_date >= date.max:
            raise ValidationError("to must be before 9999-12-31", field="to")

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def matches(self, r: ResolvedDeduction) -> bool:
        e = r.event
        if e is None:
            return False
        if not (self.start_date <= e.event_date <= self.end_date):
            return False
        if self.controller_id and e.controller_id != self.controller_id:
            return False
        if self.teacher_id and e.teacher_id != self.teacher_id:
            return False
        return True


@dataclass(frozen=True)
class AggregateRow:
    """Read-model: one group of resolved events (controller, teacher, student or day)."""

    key: str
    name: str
    total_events: int = 0
    total_lateness_minutes: int = 0
    total_deduction: Decimal = Decimal("0")
    unresolved_events: int = 0
    waived_events: int = 0
    teacher_name: Optional[str] = None
    student_count: Optional[int] = None

    @property
    def average_lateness(self) -> float:
        if self.total_events == 0:
            return 0.0
        return self.total_lateness_minutes / self.total_events


@dataclass(frozen=True)
class BreakdownSummary:
    total_events: int
    total_lateness_minutes: int
    total_deduction: Decimal
    unresolved_events: int
    controller_id: Optional[str] = None
    waived_events: int = 0
    waived_amount: Decimal = Decimal("0")
    teacher_id: Optional[str] = None
    # Controller-scoped drill-down, filled from the same slice as the totals above.
    unique_teachers: Optional[int] = None
    unique_students: Optional[int] = None
    teacher_statistics: Optional[List[AggregateRow]] = None
    student_statistics: Optional[List[AggregateRow]] = None
    daily_statistics: Optional[List[AggregateRow]] = None

    @property
    def average_lateness(self) -> float:
        if self.total_events == 0:
            return 0.0
        return self.total_lateness_minutes / self.total_events


@dataclass(frozen=True)
class Breakdown:
    summary: BreakdownSummary
    records: List[ResolvedDeduction] = field(default_factory=list)
