from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, to_decimal
from .model import DeductionWaiver
from .repository import WaiverRepository

_COLUMNS = "waiver_id, teacher_id, waiver_date, original_amount, reason, admin_id"


def _to_waiver(r: Dict[str, Any]) -> DeductionWaiver:
    waiver_date = r["waiver_date"]
    if isinstance(waiver_date, str):
        waiver_date = date.fromisoformat(waiver_date)
    return DeductionWaiver(
        waiver_id=int(r["waiver_id"]),
        teacher_id=str(r["teacher_id"]),
        waiver_date=waiver_date,
        original_amount=to_decimal(r["original_amount"]),
        reason=r["reason"],
        admin_id=r.get("admin_id"),
    )


class MySQLWaiverRepository(WaiverRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_in_window(
        self,
        *,
        start_date: date,
        end_date: date,
        teacher_id: Optional[str] = None,
    ) -> Sequence[DeductionWaiver]:
        sql = f"SELECT {_COLUMNS} FROM deduction_waivers WHERE waiver_date BETWEEN %s AND %s"
        params: list[Any] = [start_date, end_date]
        if teacher_id:
            sql += " AND teacher_id=%s"
            params.append(teacher_id)
        sql += " ORDER BY waiver_date ASC, teacher_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_waiver(r) for r in fetchall(cur)]

    def create_many(self, waivers: Sequence[DeductionWaiver]) -> Sequence[DeductionWaiver]:
        created: List[DeductionWaiver] = []
        # One transaction; the unique key turns a concurrent duplicate into a skipped row.
        with db_cursor(self._conn_factory) as (_, cur):
            for w in waivers:
                cur.execute(
                    """
                    INSERT IGNORE INTO deduction_waivers(teacher_id, waiver_date, original_amount, reason, admin_id)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (w.teacher_id, w.waiver_date, w.original_amount, w.reason, w.admin_id),
                )
                if cur.rowcount > 0:
                    created.append(
                        DeductionWaiver(
                            waiver_id=int(cur.lastrowid),
                            teacher_id=w.teacher_id,
                            waiver_date=w.waiver_date,
                            original_amount=w.original_amount,
                            reason=w.reason,
                            admin_id=w.admin_id,
                        )
                    )
        return created

    def delete(self, waiver_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM deduction_waivers WHERE waiver_id=%s", (int(waiver_id),))
            return cur.rowcount > 0
