from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.exceptions import DuplicateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import PackageBaseAmount
from .repository import PackageBaseAmountRepository

_COLUMNS = "package_id, package_name, lateness_base_amount, absence_base_amount"


def _to_amount(r: Dict[str, Any]) -> PackageBaseAmount:
    return PackageBaseAmount(
        package_id=int(r["package_id"]),
        package_name=r["package_name"],
        lateness_base_amount=to_decimal(r["lateness_base_amount"]),
        absence_base_amount=to_decimal(r["absence_base_amount"]),
    )


class MySQLPackageBaseAmountRepository(PackageBaseAmountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[PackageBaseAmount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM package_base_amounts ORDER BY package_name ASC")
            return [_to_amount(r) for r in fetchall(cur)]

    def get_by_name(self, package_name: str) -> Optional[PackageBaseAmount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM package_base_amounts WHERE package_name=%s", (package_name,))
            r = fetchone(cur)
            return _to_amount(r) if r else None

    def create(self, amount: PackageBaseAmount) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO package_base_amounts(package_name, lateness_base_amount, absence_base_amount)
                    VALUES(%s,%s,%s)
                    """,
                    (amount.package_name, amount.lateness_base_amount, amount.absence_base_amount),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            raise DuplicateError(f"Package deduction already exists: {amount.package_name}")

    def upsert(self, amount: PackageBaseAmount) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO package_base_amounts(package_name, lateness_base_amount, absence_base_amount)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    lateness_base_amount=VALUES(lateness_base_amount),
                    absence_base_amount=VALUES(absence_base_amount)
                """,
                (amount.package_name, amount.lateness_base_amount, amount.absence_base_amount),
            )

            # If it was an update, lastrowid can be 0; fetch package_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute("SELECT package_id FROM package_base_amounts WHERE package_name=%s", (amount.package_name,))
            r = fetchone(cur)
            return int(r["package_id"]) if r else 0

    def delete(self, package_name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM package_base_amounts WHERE package_name=%s", (package_name,))
            return cur.rowcount > 0
