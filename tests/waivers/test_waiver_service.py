from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.lateness_system.lateness_system.analytics.service import AnalyticsService
from src.lateness_system.lateness_system.core.exceptions import NotFoundError, ValidationError
from src.lateness_system.lateness_system.events.model import LatenessEvent
from src.lateness_system.lateness_system.tiers.model import DeductionTier
from src.lateness_system.lateness_system.waivers.model import DeductionWaiver
from src.lateness_system.lateness_system.waivers.service import DeductionWaiverService


class StaticTiers:
    def list_all(self):
        return [
            DeductionTier(1, None, 1, 3, 4, 7, Decimal("10")),
            DeductionTier(2, None, 2, 3, 8, 15, Decimal("20")),
        ]


class NoPackages:
    def list_all(self):
        return []


class ListEventSource:
    def __init__(self, events):
        self.events = events

    def fetch_events(self, *, start_date, end_date, controller_id=None, teacher_id=None):
        return [
            e
            for e in self.events
            if start_date <= e.event_date <= end_date and (not teacher_id or e.teacher_id == teacher_id)
        ]


class InMemoryWaivers:
    def __init__(self, waivers=()):
        self.rows = {w.waiver_id: w for w in waivers}
        # Keys another request inserts between our preview and our insert.
        self.raced = set()

    def list_in_window(self, *, start_date, end_date, teacher_id=None):
        return [
            w
            for w in self.rows.values()
            if start_date <= w.waiver_date <= end_date and (not teacher_id or w.teacher_id == teacher_id)
        ]

    def create_many(self, waivers):
        created = []
        for w in waivers:
            if w.key in self.raced or any(r.key == w.key for r in self.rows.values()):
                continue
            saved = replace(w, waiver_id=len(self.rows) + 1)
            self.rows[saved.waiver_id] = saved
            created.append(saved)
        return created

    def delete(self, waiver_id):
        return self.rows.pop(waiver_id, None) is not None


def _event(day, minutes, teacher="T1"):
    scheduled = datetime(2024, 3, day, 8, 0, tzinfo=timezone.utc)
    return LatenessEvent(
        student_id="S1",
        teacher_id=teacher,
        controller_id="C1",
        scheduled_time=scheduled,
        actual_start_time=scheduled + timedelta(minutes=minutes),
        package_name="3 days",
        teacher_name=f"Teacher {teacher}",
    )


EVENTS = [
    _event(1, 5),
    _event(1, 10),
    _event(1, 2),  # excused
    _event(1, 40),  # unconfigured
    _event(2, 5),
    _event(2, 5, teacher="T2"),
    _event(3, 5, teacher="T3"),
]


def _service(waivers=None, max_days=366):
    waivers = waivers if waivers is not None else InMemoryWaivers()
    analytics = AnalyticsService(ListEventSource(EVENTS), StaticTiers(), NoPackages(), waivers=waivers, max_days=max_days)
    return DeductionWaiverService(waivers, analytics), waivers


def _payload(*teachers, start="2024-03-01", end="2024-03-03", reason="Network outage"):
    return {"teacherIds": list(teachers), "dateRange": {"startDate": start, "endDate": end}, "reason": reason}


def test_preview_sums_matched_deductions_per_teacher_day():
    svc, _ = _service()
    preview = svc.preview(_payload("T1", "T2"))

    assert [(r.teacher_id, r.waiver_date, r.events, r.amount) for r in preview.rows] == [
        ("T1", date(2024, 3, 1), 2, Decimal("9.00")),
        ("T1", date(2024, 3, 2), 1, Decimal("3.00")),
        ("T2", date(2024, 3, 2), 1, Decimal("3.00")),
    ]
    assert preview.rows[0].teacher_name == "Teacher T1"
    assert preview.total_amount == Decimal("15.00")
    assert preview.affected_teachers == 2


def test_apply_stores_original_amounts_and_skips_waived_days():
    existing = DeductionWaiver(1, "T1", date(2024, 3, 2), Decimal("3.00"), "earlier")
    svc, repo = _service(InMemoryWaivers([existing]))

    result = svc.apply(dict(_payload("T1"), adminId="A1"))

    assert [(w.waiver_date, w.original_amount, w.admin_id) for w in result.created] == [
        (date(2024, 3, 1), Decimal("9.00"), "A1")
    ]
    assert result.total_amount_waived == Decimal("9.00")
    assert len(repo.rows) == 2
    assert svc.apply(_payload("T1")).records_affected == 0


def test_apply_reports_only_rows_actually_inserted():
    svc, repo = _service()
    repo.raced = {("T2", date(2024, 3, 2))}

    result = svc.apply(_payload("T1", "T2"))

    assert result.records_affected == 2
    assert result.affected_teachers == 1
    assert result.total_amount_waived == Decimal("12.00")


def test_apply_requires_reason_and_window_limit():
    svc, _ = _service(max_days=2)

    with pytest.raises(ValidationError) as exc:
        svc.apply(_payload("T1", end="2024-03-02", reason=""))
    assert exc.value.field == "reason"

    with pytest.raises(ValidationError) as exc:
        svc.preview(_payload("T1"))
    assert exc.value.field == "to"


def test_list_and_delete():
    svc, _ = _service()
    svc.apply(_payload("T1", "T3"))

    listed = svc.list_waivers(start=date(2024, 3, 1), end=date(2024, 3, 31), teacher_id="T3")
    assert [(w.teacher_id, w.waiver_date) for w in listed] == [("T3", date(2024, 3, 3))]

    svc.delete_waiver(listed[0].waiver_id)
    with pytest.raises(NotFoundError):
        svc.delete_waiver(listed[0].waiver_id)
