"""Row serializers for the JSON API and the CSV/XLSX exports.

Keys are camelCase to match what the admin UI already consumes. Averages are rounded here
and nowhere else.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..analytics.model import AggregateRow, Breakdown, BreakdownSummary
from ..common.datetime_utils import to_iso_utc
from ..core.constants import DEFAULT_CURRENCY, MONEY_QUANT
from ..deductions.model import ResolvedDeduction
from ..deductions.warnings import ResolutionWarning
from ..packages.model import EffectiveBaseAmounts, PackageBaseAmount
from ..tiers.model import DeductionTier
from ..waivers.model import DeductionWaiver, WaiverPreview, WaiverResult
from .csv_export import Column


def money(value: Decimal) -> float:
    return float(Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP))


def average(value: float) -> float:
    return round(float(value), 2)


def format_amount(value: Any, currency: str = DEFAULT_CURRENCY) -> str:
    return f"{Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)} {currency}"


def with_currency(rows: Iterable[Mapping[str, Any]], fields: Sequence[str], currency: str = DEFAULT_CURRENCY) -> List[dict]:
    out = []
    for row in rows:
        item = dict(row)
        for f in fields:
            if item.get(f) is not None:
                item[f] = format_amount(item[f], currency)
        out.append(item)
    return out


def aggregate_row_to_dict(row: AggregateRow) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": row.key,
        "name": row.name,
        "totalEvents": row.total_events,
        "totalLatenessMinutes": row.total_lateness_minutes,
        "averageLateness": average(row.average_lateness),
        "totalDeduction": money(row.total_deduction),
        "unresolvedEvents": row.unresolved_events,
        "waivedEvents": row.waived_events,
    }
    if row.teacher_name is not None:
        data["teacherName"] = row.teacher_name
    if row.student_count is not None:
        data["students"] = row.student_count
    return data


def daily_row_to_dict(row: AggregateRow) -> Dict[str, Any]:
    return {
        "date": row.key,
        "totalEvents": row.total_events,
        "totalLatenessMinutes": row.total_lateness_minutes,
        "averageLateness": average(row.average_lateness),
        "totalDeduction": money(row.total_deduction),
        "unresolvedEvents": row.unresolved_events,
        "waivedEvents": row.waived_events,
    }


def resolved_to_record(r: ResolvedDeduction) -> Dict[str, Any]:
    e = r.event
    return {
        "date": e.event_date.isoformat(),
        "studentId": e.student_id,
        "studentName": e.student_name or e.student_id,
        "teacherId": e.teacher_id,
        "teacherName": e.teacher_name or e.teacher_id,
        "controllerId": e.controller_id,
        "controllerName": e.controller_name,
        "studentPackage": e.package_name,
        "scheduledTime": to_iso_utc(e.scheduled_time),
        "actualStartTime": to_iso_utc(e.actual_start_time),
        "latenessMinutes": r.lateness_minutes,
        "deductionTier": r.label,
        "deductionPercent": float(r.deduction_percent),
        "baseAmount": money(r.base_amount),
        "deductionApplied": money(r.deduction_applied),
        "waived": r.waived,
    }


def summary_to_dict(summary: BreakdownSummary) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "totalEvents": summary.total_events,
        "totalLateness": summary.total_lateness_minutes,
        "totalDeduction": money(summary.total_deduction),
        "averageLateness": average(summary.average_lateness),
        "unresolvedEvents": summary.unresolved_events,
        "waivedEvents": summary.waived_events,
        "waivedAmount": money(summary.waived_amount),
        "controllerId": summary.controller_id,
        "teacherId": summary.teacher_id,
    }
    if summary.teacher_statistics is not None:
        data["uniqueTeachers"] = summary.unique_teachers
        data["uniqueStudents"] = summary.unique_students
        data["teacherStatistics"] = [aggregate_row_to_dict(r) for r in summary.teacher_statistics]
        data["studentStatistics"] = [aggregate_row_to_dict(r) for r in summary.student_statistics or []]
        data["dailyStatistics"] = [daily_row_to_dict(r) for r in summary.daily_statistics or []]
    return data


def breakdown_to_dict(breakdown: Breakdown) -> Dict[str, Any]:
    return {
        "summary": summary_to_dict(breakdown.summary),
        "records": [resolved_to_record(r) for r in breakdown.records],
    }


def warning_to_dict(w: ResolutionWarning) -> Dict[str, Any]:
    return {"code": w.code.value, "message": w.message, "count": w.count}


def tier_to_dict(t: DeductionTier) -> Dict[str, Any]:
    return {
        "id": t.tier_id,
        "teacherId": t.teacher_id,
        "isGlobal": t.is_global,
        "tier": t.tier,
        "excusedThreshold": t.excused_threshold,
        "startMinute": t.start_minute,
        "endMinute": t.end_minute,
        "isUnlimited": t.is_unlimited,
        "deductionPercent": float(t.deduction_percent),
    }


def package_to_dict(p: PackageBaseAmount) -> Dict[str, Any]:
    return {
        "id": p.package_id,
        "packageName": p.package_name,
        "latenessBaseAmount": money(p.lateness_base_amount),
        "absenceBaseAmount": money(p.absence_base_amount),
    }


def effective_amounts_to_dict(a: EffectiveBaseAmounts, currency: Optional[str] = None) -> Dict[str, Any]:
    return {
        "packageName": a.package_name,
        "latenessBaseAmount": money(a.lateness_base_amount),
        "absenceBaseAmount": money(a.absence_base_amount),
        "defaulted": a.defaulted,
        "currency": currency or DEFAULT_CURRENCY,
    }



def waiver_to_dict(w: DeductionWaiver) -> Dict[str, Any]:
    return {
        "id": w.waiver_id,
        "teacherId": w.teacher_id,
        "date": w.waiver_date.isoformat(),
        "originalAmount": money(w.original_amount),
        "reason": w.reason,
        "adminId": w.admin_id,
    }


def waiver_preview_to_dict(p: WaiverPreview) -> Dict[str, Any]:
    return {
        "records": [
            {
                "teacherId": r.teacher_id,
                "teacherName": r.teacher_name,
                "date": r.waiver_date.isoformat(),
                "events": r.events,
                "amount": money(r.amount),
                "alreadyWaived": r.already_waived,
            }
            for r in p.rows
        ],
        "summary": {
            "totalRecords": len(p.pending),
            "totalAmount": money(p.total_amount),
            "affectedTeachers": p.affected_teachers,
        },
    }


def waiver_result_to_dict(r: WaiverResult) -> Dict[str, Any]:
    return {
        "recordsAffected": r.records_affected,
        "financialImpact": {
            "totalAmountWaived": money(r.total_amount_waived),
            "affectedTeachers": r.affected_teachers,
        },
        "waivers": [waiver_to_dict(w) for w in r.created],
    }

DAILY_COLUMNS = [
    Column("date"),
    Column("totalEvents"),
    Column("totalLatenessMinutes"),
    Column("averageLateness"),
    Column("totalDeduction"),
    Column("unresolvedEvents"),
    Column("waivedEvents"),
]

AGGREGATE_COLUMNS = [
    Column("id"),
    Column("name"),
    Column("totalEvents"),
    Column("totalLatenessMinutes"),
    Column("averageLateness"),
    Column("totalDeduction"),
    Column("unresolvedEvents"),
    Column("waivedEvents"),
]

RECORD_COLUMNS = [
    Column("date"),
    Column("studentId"),
    Column("studentName"),
    Column("teacherId"),
    Column("teacherName"),
    Column("controllerId"),
    Column("controllerName"),
    Column("studentPackage"),
    Column("scheduledTime"),
    Column("actualStartTime"),
    Column("latenessMinutes"),
    Column("deductionTier"),
    Column("deductionPercent"),
    Column("baseAmount"),
    Column("deductionApplied"),
    Column("waived"),
]
