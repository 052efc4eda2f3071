from __future__ import annotations

from decimal import Decimal

from src.lateness_system.lateness_system.presentation.csv_export import Column, parse_csv, to_csv
from src.lateness_system.lateness_system.presentation.serializers import format_amount, with_currency


def test_header_from_record_keys():
    data = to_csv([{"name": "Abebe", "totalEvents": 3}])
    assert data.decode("utf-8-sig") == "name,totalEvents\r\nAbebe,3\r\n"


def test_column_spec_orders_and_renames():
    rows = [{"a": 1, "b": 2}]
    text = to_csv(rows, [Column("b", "Second"), Column("a")]).decode("utf-8-sig")
    assert text.splitlines()[0] == "Second,a"
    assert text.splitlines()[1] == "2,1"


def test_special_characters_are_quoted():
    rows = [{"name": 'Smith, "Jr"', "note": "line1\nline2", "plain": "ok"}]
    text = to_csv(rows).decode("utf-8-sig")
    assert '"Smith, ""Jr"""' in text
    assert '"line1\nline2"' in text
    assert ",ok\r\n" in text


def test_round_trip_for_string_values():
    rows = [
        {"name": 'Smith, "Jr"', "package": "3 days", "note": "a\r\nb"},
        {"name": "Ayana", "package": "Europe", "note": ""},
    ]
    assert parse_csv(to_csv(rows)) == rows


def test_empty_input():
    assert to_csv([]) == b""
    assert parse_csv(b"") == []
    header_only = to_csv([], [Column("date")]).decode("utf-8-sig")
    assert header_only == "date\r\n"


def test_currency_applied_by_caller():
    rows = with_currency([{"totalDeduction": 3, "name": "x"}], ["totalDeduction", "missing"], "ETB")
    assert rows == [{"totalDeduction": "3.00 ETB", "name": "x"}]
    assert format_amount(Decimal("10.005")) == "10.01 ETB"
