from __future__ import annotations

from enum import Enum


class DeductionOutcome(str, Enum):
    """Kết quả phân giải một sự kiện đi muộn."""

    MATCHED = "MATCHED"
    EXCUSED = "EXCUSED"
    UNCONFIGURED = "UNCONFIGURED"


class GroupBy(str, Enum):
    """Chiều gom nhóm cho thống kê."""

    CONTROLLER = "controller"
    TEACHER = "teacher"
    STUDENT = "student"
    DAY = "day"


class SortKey(str, Enum):
    NAME = "name"
    TOTAL_EVENTS = "totalEvents"
    TOTAL_LATENESS = "totalLatenessMinutes"
    AVERAGE_LATENESS = "averageLateness"
    TOTAL_DEDUCTION = "totalDeduction"


class WarningCode(str, Enum):
    """Non-fatal conditions raised while resolving deductions."""

    TIER_CONFLICT = "TIER_CONFLICT"
    UNCONFIGURED = "UNCONFIGURED"
    MISSING_PACKAGE_BASE_AMOUNT = "MISSING_PACKAGE_BASE_AMOUNT"
