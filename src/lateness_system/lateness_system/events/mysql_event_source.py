from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import DataFetchFailure, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, to_utc_datetime
from .model import LatenessEvent
from .source import EventSource

logger = logging.getLogger(__name__)


class MySQLEventSource(EventSource):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def fetch_events(
        self,
        *,
        start_date: date,
        end_date: date,
        controller_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[LatenessEvent]:
        if end_date >= date.max:
            raise ValidationError("to must be before 9999-12-31", field="to")

        # Half-open window so the whole end day is included.
        clauses = ["scheduled_time >= %s", "scheduled_time < %s"]
        params: list[object] = [
            datetime.combine(start_date, time.min),
            datetime.combine(end_date + timedelta(days=1), time.min),
        ]

        if controller_id:
            clauses.append("controller_id=%s")
            params.append(str(controller_id))
        if teacher_id:
            clauses.append("teacher_id=%s")
            params.append(str(teacher_id))

        where = " AND ".join(clauses)

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT
                        student_id, student_name,
                        teacher_id, teacher_name,
                        controller_id, controller_name,
                        package_name, scheduled_time, actual_start_time
                    FROM lateness_events
                    WHERE {where}
                    ORDER BY scheduled_time ASC, event_id ASC
                    """,
                    tuple(params),
                )
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            logger.exception("Failed to read lateness events for %s..%s", start_date, end_date)
            raise DataFetchFailure("Lateness events are unavailable right now") from e

        return [
            LatenessEvent(
                student_id=str(r["student_id"]),
                teacher_id=str(r["teacher_id"]),
                controller_id=str(r["controller_id"]) if r.get("controller_id") is not None else None,
                scheduled_time=to_utc_datetime(r["scheduled_time"]),
                actual_start_time=to_utc_datetime(r["actual_start_time"]),
                package_name=r.get("package_name") or "",
                student_name=r.get("student_name"),
                teacher_name=r.get("teacher_name"),
                controller_name=r.get("controller_name"),
            )
            for r in rows
        ]
