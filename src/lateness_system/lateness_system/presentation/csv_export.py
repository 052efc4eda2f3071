from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence

CSV_ENCODING = "utf-8-sig"


@dataclass(frozen=True)
class Column:
    key: str
    header: Optional[str] = None

    @property
    def title(self) -> str:
        return self.header or self.key


def columns_for(rows: Sequence[Mapping[str, Any]], columns: Optional[Sequence[Column]] = None) -> List[Column]:
    if columns:
        return list(columns)
    if not rows:
        return []
    return [Column(k) for k in rows[0].keys()]


def cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def to_csv(rows: Sequence[Mapping[str, Any]], columns: Optional[Sequence[Column]] = None) -> bytes:
    """Encode records as RFC 4180 CSV.

    Header comes from ``columns`` or from the first record's keys. Fields holding a comma,
    quote, CR or LF are quoted and embedded quotes doubled; records end with CRLF.
    """

    cols = columns_for(rows, columns)
    if not cols:
        return b""

    out = io.StringIO()
    writer = csv.writer(out, delimiter=",", quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow([c.title for c in cols])
    for row in rows:
        writer.writerow([cell(row.get(c.key)) for c in cols])

    return out.getvalue().encode(CSV_ENCODING)


def parse_csv(data: bytes) -> List[dict]:
    """Inverse of ``to_csv``: one dict of strings per record, keyed by header."""

    if not data:
        return []
    text = data.decode(CSV_ENCODING)
    reader = csv.DictReader(io.StringIO(text, newline=""))
    return [dict(r) for r in reader]
