"""Ví dụ: dùng service layer (không qua Flask).

Resolves an exported events file against the configured tiers and prints the
per-teacher totals and the detailed CSV.
"""

import importlib
import sys
from datetime import date

from config import get_settings_module

from src.lateness_system.lateness_system.container import AppSettings, build_container, wire_container
from src.lateness_system.lateness_system.events.json_event_source import JsonFileEventSource
from src.lateness_system.lateness_system.presentation.csv_export import to_csv
from src.lateness_system.lateness_system.presentation.serializers import (
    RECORD_COLUMNS,
    aggregate_row_to_dict,
    resolved_to_record,
)


def main(events_path: str, start: str, end: str, teacher_id: str):
    settings = importlib.import_module(get_settings_module())
    db_backed = build_container(db_config=settings.DB_CONFIG, settings=AppSettings.from_module(settings))
    container = wire_container(
        tiers_repo=db_backed.tiers_repo,
        packages_repo=db_backed.packages_repo,
        event_source=JsonFileEventSource(events_path),
        waivers_repo=db_backed.waivers_repo,
        settings=db_backed.settings,
    )

    report = container.analytics_service.build_analytics(
        start=date.fromisoformat(start), end=date.fromisoformat(end), teacher_id=teacher_id
    )
    for row in report.teacher_data:
        print(aggregate_row_to_dict(row))

    breakdown = container.analytics_service.build_breakdown(
        start=date.fromisoformat(start), end=date.fromisoformat(end), teacher_id=teacher_id
    )
    rows = [resolved_to_record(r) for r in breakdown.breakdown.records]
    print(to_csv(rows, RECORD_COLUMNS).decode("utf-8-sig"))


if __name__ == "__main__":
    if len(sys.argv) != 5:
        raise SystemExit("usage: example_usage.py EVENTS_JSON FROM TO TEACHER_ID")
    main(*sys.argv[1:])
