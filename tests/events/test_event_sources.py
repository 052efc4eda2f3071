from __future__ import annotations

import json
from datetime import date, datetime, timezone

import pytest

from src.lateness_system.lateness_system.core.exceptions import DataFetchFailure, ValidationError
from src.lateness_system.lateness_system.events.json_event_source import JsonFileEventSource
from src.lateness_system.lateness_system.events.model import LatenessEvent
from src.lateness_system.lateness_system.events.mysql_event_source import MySQLEventSource


def _event(scheduled: str, actual: str, **extra) -> dict:
    data = {
        "studentId": "S1",
        "teacherId": "T1",
        "controllerId": "C1",
        "scheduledTime": scheduled,
        "actualStartTime": actual,
        "packageName": "3 days",
    }
    data.update(extra)
    return data


def test_lateness_minutes_round_half_up():
    e = LatenessEvent.from_dict(_event("2024-03-01T08:00:00Z", "2024-03-01T08:05:30Z"))
    assert e.lateness_minutes == 6

    e = LatenessEvent.from_dict(_event("2024-03-01T08:00:00Z", "2024-03-01T08:05:29Z"))
    assert e.lateness_minutes == 5


def test_early_start_counts_as_zero():
    e = LatenessEvent.from_dict(_event("2024-03-01T08:00:00Z", "2024-03-01T07:55:00Z"))
    assert e.lateness_minutes == 0


def test_event_date_is_utc_date_of_schedule():
    e = LatenessEvent.from_dict(_event("2024-03-01T23:30:00-02:00", "2024-03-02T01:40:00Z"))
    assert e.scheduled_time == datetime(2024, 3, 2, 1, 30, tzinfo=timezone.utc)
    assert e.event_date == date(2024, 3, 2)
    assert e.lateness_minutes == 10


def test_missing_ids_and_bad_timestamps_rejected():
    with pytest.raises(ValidationError) as exc:
        LatenessEvent.from_dict(_event("2024-03-01T08:00:00Z", "2024-03-01T08:05:00Z", teacherId=""))
    assert exc.value.field == "teacherId"

    with pytest.raises(ValidationError):
        LatenessEvent.from_dict(_event("yesterday", "2024-03-01T08:05:00Z"))


def test_json_source_filters_window_and_ids(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(
        json.dumps(
            [
                _event("2024-03-01T08:00:00Z", "2024-03-01T08:05:00Z"),
                _event("2024-03-02T08:00:00Z", "2024-03-02T08:10:00Z", teacherId="T2"),
                _event("2024-03-05T08:00:00Z", "2024-03-05T08:10:00Z"),
            ]
        ),
        encoding="utf-8",
    )
    src = JsonFileEventSource(path)

    assert len(src.fetch_events(start_date=date(2024, 3, 1), end_date=date(2024, 3, 2))) == 2
    only_t2 = src.fetch_events(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31), teacher_id="T2")
    assert [e.teacher_id for e in only_t2] == ["T2"]
    assert src.fetch_events(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31), controller_id="C9") == []


def test_json_source_failures_are_data_fetch_failures(tmp_path):
    missing = JsonFileEventSource(tmp_path / "missing.json")
    with pytest.raises(DataFetchFailure):
        missing.fetch_events(start_date=date(2024, 3, 1), end_date=date(2024, 3, 1))

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(DataFetchFailure):
        JsonFileEventSource(bad).fetch_events(start_date=date(2024, 3, 1), end_date=date(2024, 3, 1))


class _UnusedConnection:
    def connect(self):
        raise AssertionError("no query expected")


def test_mysql_source_rejects_last_representable_date_without_querying():
    source = MySQLEventSource(_UnusedConnection())
    with pytest.raises(ValidationError) as exc:
        source.fetch_events(start_date=date(9999, 12, 1), end_date=date.max)
    assert exc.value.field == "to"
