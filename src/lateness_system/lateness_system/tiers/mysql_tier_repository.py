from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import DeductionTier
from .repository import TierRepository
from .rules import ensure_fits_scope

_COLUMNS = "tier_id, teacher_id, tier, excused_threshold, start_minute, end_minute, deduction_percent"


def _to_tier(r: Dict[str, Any]) -> DeductionTier:
    return DeductionTier(
        tier_id=int(r["tier_id"]),
        teacher_id=str(r["teacher_id"]) if r.get("teacher_id") is not None else None,
        tier=int(r["tier"]),
        excused_threshold=int(r.get("excused_threshold") or 0),
        start_minute=int(r["start_minute"]),
        end_minute=int(r["end_minute"]) if r.get("end_minute") is not None else None,
        deduction_percent=to_decimal(r["deduction_percent"]),
    )


class MySQLTierRepository(TierRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[DeductionTier]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM deduction_tiers
                ORDER BY tier ASC, start_minute ASC, tier_id ASC
                """
            )
            return [_to_tier(r) for r in fetchall(cur)]

    def list_for_scope(self, teacher_id: Optional[str]) -> Sequence[DeductionTier]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM deduction_tiers
                WHERE teacher_id <=> %s
                ORDER BY tier ASC, start_minute ASC, tier_id ASC
                """,
                (teacher_id,),
            )
            return [_to_tier(r) for r in fetchall(cur)]

    def get_by_id(self, tier_id: int) -> Optional[DeductionTier]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM deduction_tiers WHERE tier_id=%s", (int(tier_id),))
            r = fetchone(cur)
            return _to_tier(r) if r else None

    def _lock_scope(self, cur, teacher_id: Optional[str]) -> list[DeductionTier]:
        # Row locks on the scope serialize concurrent writers until commit.
        cur.execute(
            f"SELECT {_COLUMNS} FROM deduction_tiers WHERE teacher_id <=> %s FOR UPDATE",
            (teacher_id,),
        )
        return [_to_tier(r) for r in fetchall(cur)]

    def create(self, tier: DeductionTier) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            ensure_fits_scope(tier, self._lock_scope(cur, tier.teacher_id))
            cur.execute(
                """
                INSERT INTO deduction_tiers(teacher_id, tier, excused_threshold, start_minute, end_minute, deduction_percent)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    tier.teacher_id,
                    tier.tier,
                    tier.excused_threshold,
                    tier.start_minute,
                    tier.end_minute,
                    tier.deduction_percent,
                ),
            )
            return int(cur.lastrowid)

    def update(self, tier: DeductionTier) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            ensure_fits_scope(tier, self._lock_scope(cur, tier.teacher_id))
            cur.execute(
                """
                UPDATE deduction_tiers
                SET teacher_id=%s, tier=%s, excused_threshold=%s, start_minute=%s, end_minute=%s, deduction_percent=%s
                WHERE tier_id=%s
                """,
                (
                    tier.teacher_id,
                    tier.tier,
                    tier.excused_threshold,
                    tier.start_minute,
                    tier.end_minute,
                    tier.deduction_percent,
                    int(tier.tier_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, tier_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM deduction_tiers WHERE tier_id=%s", (int(tier_id),))
            return cur.rowcount > 0
