from __future__ import annotations

import io
from typing import Any, Mapping, Optional, Sequence

import pandas as pd

from .csv_export import Column, cell, columns_for

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _xlsx_value(value: Any) -> Any:
    # Keep numbers numeric so spreadsheet formulas work on them.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return cell(value)


def to_xlsx(
    rows: Sequence[Mapping[str, Any]],
    columns: Optional[Sequence[Column]] = None,
    *,
    sheet_name: str = "Lateness",
) -> bytes:
    cols = columns_for(rows, columns)
    data = [[_xlsx_value(row.get(c.key)) for c in cols] for row in rows]
    df = pd.DataFrame(data, columns=[c.title for c in cols])

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return output.getvalue()
