from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.lateness_system.lateness_system.analytics.aggregator import EventAggregator, sort_rows
from src.lateness_system.lateness_system.analytics.model import AggregateRow, AnalyticsFilter
from src.lateness_system.lateness_system.common.cancellation import CancellationToken
from src.lateness_system.lateness_system.core.enums import GroupBy, SortKey
from src.lateness_system.lateness_system.core.exceptions import OperationCancelled, ValidationError
from src.lateness_system.lateness_system.deductions.resolver import TierResolver
from src.lateness_system.lateness_system.deductions.snapshot import TierConfigSnapshot
from src.lateness_system.lateness_system.events.model import LatenessEvent
from src.lateness_system.lateness_system.tiers.model import DeductionTier

TIERS = [
    DeductionTier(1, None, 1, 3, 4, 7, Decimal("10")),
    DeductionTier(2, None, 2, 3, 8, 15, Decimal("20")),
    DeductionTier(3, None, 3, 3, 16, 30, Decimal("35")),
]


def _event(day: int, minutes: int, *, student="S1", teacher="T1", controller="C1", package="3 days"):
    scheduled = datetime(2024, 3, day, 8, 0, tzinfo=timezone.utc)
    return LatenessEvent(
        student_id=student,
        teacher_id=teacher,
        controller_id=controller,
        scheduled_time=scheduled,
        actual_start_time=scheduled + timedelta(minutes=minutes),
        package_name=package,
        student_name=f"Student {student}",
        teacher_name=f"Teacher {teacher}",
        controller_name=f"Controller {controller}" if controller else None,
    )


def _resolved(events):
    return TierResolver(TierConfigSnapshot(tiers=TIERS)).resolve_many(events)


EVENTS = [
    _event(1, 5),                                   # Tier 1 -> 3.00
    _event(1, 10, student="S2"),                    # Tier 2 -> 6.00
    _event(2, 2, teacher="T2", controller="C2"),    # Excused
    _event(2, 45, teacher="T2", controller="C2"),   # Unconfigured
    _event(3, 20, student="S3", teacher="T2"),      # Tier 3 -> 10.50
    _event(3, 6, controller=None),                  # no controller
]

WINDOW = AnalyticsFilter(start_date=date(2024, 3, 1), end_date=date(2024, 3, 4))


def test_group_by_teacher_totals():
    rows = EventAggregator().aggregate(_resolved(EVENTS), GroupBy.TEACHER, WINDOW)
    by_key = {r.key: r for r in rows}

    t1 = by_key["T1"]
    assert (t1.total_events, t1.total_lateness_minutes) == (3, 21)
    assert t1.total_deduction == Decimal("12.00")
    assert t1.student_count == 2
    assert t1.average_lateness == pytest.approx(7.0)

    t2 = by_key["T2"]
    assert t2.total_events == 3
    assert t2.total_lateness_minutes == 67
    assert t2.total_deduction == Decimal("10.50")
    assert t2.unresolved_events == 1


def test_controller_grouping_skips_events_without_controller():
    rows = EventAggregator().aggregate(_resolved(EVENTS), GroupBy.CONTROLLER, WINDOW)
    assert [r.key for r in rows] == ["C1", "C2"]
    assert sum(r.total_events for r in rows) == 5


def test_student_rows_carry_teacher_name():
    rows = EventAggregator().aggregate(_resolved(EVENTS), GroupBy.STUDENT, WINDOW)
    assert {r.key: r.teacher_name for r in rows}["S3"] == "Teacher T2"


def test_empty_input_gives_zeroed_row():
    row = EventAggregator().summarize([], WINDOW)
    assert row.total_events == 0
    assert row.average_lateness == 0
    assert row.total_deduction == Decimal("0")


def test_daily_trend_includes_days_without_events():
    rows = EventAggregator().daily_trend(_resolved(EVENTS), WINDOW)
    assert [r.key for r in rows] == ["2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04"]
    empty = rows[-1]
    assert (empty.total_events, empty.average_lateness, empty.total_deduction) == (0, 0, Decimal("0"))
    assert rows[0].total_deduction == Decimal("9.00")


def test_filter_narrows_by_ids_and_window():
    resolved = _resolved(EVENTS)
    only_c2 = AnalyticsFilter(start_date=date(2024, 3, 1), end_date=date(2024, 3, 2), controller_id="C2")
    row = EventAggregator().summarize(resolved, only_c2)
    assert row.total_events == 2


def test_inverted_window_rejected():
    with pytest.raises(ValidationError):
        AnalyticsFilter(start_date=date(2024, 3, 2), end_date=date(2024, 3, 1))


def test_aggregate_is_idempotent_and_parallel_matches():
    resolved = _resolved(EVENTS * 50)
    agg = EventAggregator(max_workers=4)

    first = agg.aggregate(resolved, GroupBy.TEACHER, WINDOW, sort_by=SortKey.TOTAL_DEDUCTION, descending=True)
    second = agg.aggregate(resolved, GroupBy.TEACHER, WINDOW, sort_by=SortKey.TOTAL_DEDUCTION, descending=True)
    parallel = agg.aggregate_parallel(resolved, GroupBy.TEACHER, WINDOW, sort_by=SortKey.TOTAL_DEDUCTION, descending=True)

    assert first == second == parallel


def test_sort_ties_break_by_name():
    rows = [
        AggregateRow(key="b", name="Beta", total_events=2),
        AggregateRow(key="a", name="alpha", total_events=2),
        AggregateRow(key="c", name="Gamma", total_events=5),
    ]
    ordered = sort_rows(rows, SortKey.TOTAL_EVENTS, descending=True)
    assert [r.key for r in ordered] == ["c", "a", "b"]
    assert [r.key for r in sort_rows(rows)] == ["a", "b", "c"]


def test_breakdown_summary_agrees_with_tabs():
    flt = AnalyticsFilter(start_date=date(2024, 3, 1), end_date=date(2024, 3, 4), controller_id="C1")
    result = EventAggregator().breakdown(_resolved(EVENTS), flt)
    summary = result.summary

    assert summary.total_events == len(result.records) == 3
    assert summary.unique_teachers == 2
    assert summary.unique_students == 3
    for tab in (summary.teacher_statistics, summary.student_statistics, summary.daily_statistics):
        assert sum(r.total_events for r in tab) == summary.total_events
        assert sum(r.total_lateness_minutes for r in tab) == summary.total_lateness_minutes
        assert sum((r.total_deduction for r in tab), Decimal("0")) == summary.total_deduction

    assert [r.key for r in summary.daily_statistics] == ["2024-03-03", "2024-03-01"]
    # Newest first, then most late.
    assert [r.lateness_minutes for r in result.records] == [20, 10, 5]


def test_teacher_breakdown_has_no_controller_tabs():
    flt = AnalyticsFilter(start_date=date(2024, 3, 1), end_date=date(2024, 3, 4), teacher_id="T1")
    summary = EventAggregator().breakdown(_resolved(EVENTS), flt).summary
    assert summary.total_events == 3
    assert summary.teacher_statistics is None


def test_daily_trend_stops_when_cancelled_even_without_events():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(OperationCancelled):
        EventAggregator().daily_trend([], AnalyticsFilter(date(2000, 1, 1), date(2000, 12, 31)), cancel_token=token)


def test_filter_rejects_last_representable_date():
    with pytest.raises(ValidationError) as exc:
        AnalyticsFilter(date(9999, 12, 30), date.max)
    assert exc.value.field == "to"
    assert AnalyticsFilter(date(2000, 1, 1), date(2000, 12, 31)).days == 366
