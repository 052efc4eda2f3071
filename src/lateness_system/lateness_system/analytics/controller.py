from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import date_arg, export_response, format_arg, str_arg
from ..core.enums import SortKey
from ..core.exceptions import ValidationError
from ..container import Container
from ..presentation.serializers import (
    AGGREGATE_COLUMNS,
    DAILY_COLUMNS,
    RECORD_COLUMNS,
    aggregate_row_to_dict,
    breakdown_to_dict,
    daily_row_to_dict,
    resolved_to_record,
    warning_to_dict,
    with_currency,
)

_MONEY_FIELDS = ("totalDeduction", "baseAmount", "deductionApplied")


def register(app: Flask, container: Container) -> None:
    currency = container.settings.currency

    def _sort_args() -> tuple[SortKey, bool]:
        raw = (request.args.get("sort") or SortKey.NAME.value).strip()
        try:
            sort_by = SortKey(raw)
        except ValueError:
            raise ValidationError(f"sort must be one of {', '.join(k.value for k in SortKey)}", field="sort")
        order = (request.args.get("order") or "asc").strip().lower()
        if order not in {"asc", "desc"}:
            raise ValidationError("order must be asc or desc", field="order")
        return sort_by, order == "desc"

    def _analytics_report():
        sort_by, descending = _sort_args()
        return container.analytics_service.build_analytics(
            start=date_arg("from"),
            end=date_arg("to"),
            controller_id=str_arg("controllerId"),
            teacher_id=str_arg("teacherId"),
            sort_by=sort_by,
            descending=descending,
        )

    def _breakdown_report():
        return container.analytics_service.build_breakdown(
            start=date_arg("from"),
            end=date_arg("to"),
            controller_id=str_arg("controllerId"),
            teacher_id=str_arg("teacherId"),
        )

    @app.route("/analytics", methods=["GET"], endpoint="analytics")
    def analytics():
        report = _analytics_report()
        return jsonify(
            {
                "dailyTrend": [daily_row_to_dict(r) for r in report.daily_trend],
                "controllerData": [aggregate_row_to_dict(r) for r in report.controller_data],
                "teacherData": [aggregate_row_to_dict(r) for r in report.teacher_data],
                "unresolvedEvents": report.unresolved_events,
                "waivedEvents": report.waived_events,
                "warnings": [warning_to_dict(w) for w in report.warnings],
            }
        )

    @app.route("/analytics.csv", methods=["GET"], endpoint="analytics_export")
    def analytics_export():
        """Export one analytics section: daily (default), controllers or teachers."""

        section = (request.args.get("section") or "daily").strip().lower()
        if section not in {"daily", "controllers", "teachers"}:
            raise ValidationError("section must be daily, controllers or teachers", field="section")
        fmt = format_arg()

        report = _analytics_report()
        if section == "controllers":
            rows = [aggregate_row_to_dict(r) for r in report.controller_data]
            columns = AGGREGATE_COLUMNS
        elif section == "teachers":
            rows = [aggregate_row_to_dict(r) for r in report.teacher_data]
            columns = AGGREGATE_COLUMNS
        else:
            rows = [daily_row_to_dict(r) for r in report.daily_trend]
            columns = DAILY_COLUMNS

        return export_response(
            app,
            with_currency(rows, _MONEY_FIELDS, currency),
            columns,
            filename=f"lateness_{section}",
            fmt=fmt,
        )

    @app.route("/breakdown", methods=["GET"], endpoint="breakdown")
    def breakdown():
        report = _breakdown_report()
        body = breakdown_to_dict(report.breakdown)
        body["warnings"] = [warning_to_dict(w) for w in report.warnings]
        return jsonify(body)

    @app.route("/breakdown.csv", methods=["GET"], endpoint="breakdown_export")
    def breakdown_export():
        fmt = format_arg()
        report = _breakdown_report()
        rows = [resolved_to_record(r) for r in report.breakdown.records]
        return export_response(
            app,
            with_currency(rows, _MONEY_FIELDS, currency),
            RECORD_COLUMNS,
            filename="detailed_deduction",
            fmt=fmt,
        )
