from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    DataFetchFailure,
    DomainError,
    DuplicateError,
    NotFoundError,
    OperationCancelled,
    OverlappingTierRange,
    ValidationError,
)
from ..presentation.csv_export import Column, to_csv
from ..presentation.xlsx_export import XLSX_MIMETYPE, to_xlsx
from .datetime_utils import parse_iso_date, today_utc

logger = logging.getLogger(__name__)


def _status_for(error: DomainError) -> int:
    if isinstance(error, OverlappingTierRange):
        return 409
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, DuplicateError):
        return 409
    if isinstance(error, (DataFetchFailure, OperationCancelled)):
        return 503
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        body: dict[str, Any] = {"error": str(error)}
        field = getattr(error, "field", None)
        if field:
            body["field"] = field
        return jsonify(body), _status_for(error)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return jsonify({"error": error.description}), error.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if bool(app.config.get("DEBUG", False)):
            return jsonify({"error": f"Internal server error: {error}"}), 500
        return jsonify({"error": "Internal server error"}), 500


def date_arg(name: str, default: Optional[date] = None) -> date:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return default or today_utc()
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD", field=name)


def str_arg(name: str) -> Optional[str]:
    raw = (request.args.get(name) or "").strip()
    return raw or None


EXPORT_FORMATS = ("csv", "xlsx")


def format_arg(name: str = "format") -> str:
    fmt = (request.args.get(name) or "csv").strip().lower()
    if fmt not in EXPORT_FORMATS:
        raise ValidationError("format must be csv or xlsx", field=name)
    return fmt


def json_body() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def export_response(
    app: Flask,
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[Column],
    *,
    filename: str,
    fmt: str = "csv",
    sheet_name: str = "Lateness",
):
    """Write rows as a CSV (default) or XLSX download."""

    if fmt not in EXPORT_FORMATS:
        raise ValidationError("format must be csv or xlsx", field="format")
    if fmt == "xlsx":
        return app.response_class(
            to_xlsx(rows, columns, sheet_name=sheet_name),
            mimetype=XLSX_MIMETYPE,
            headers={"Content-Disposition": f"attachment; filename={filename}.xlsx"},
        )
    return app.response_class(
        to_csv(rows, columns),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}.csv"},
    )
