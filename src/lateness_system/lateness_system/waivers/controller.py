from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import date_arg, json_body, str_arg
from ..common.validators import require_int
from ..core.exceptions import ValidationError
from ..container import Container
from ..presentation.serializers import waiver_preview_to_dict, waiver_result_to_dict, waiver_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/deduction-adjustments", methods=["GET"], endpoint="deduction_adjustments_list")
    def deduction_adjustments_list():
        waivers = container.waiver_service.list_waivers(
            start=date_arg("from"),
            end=date_arg("to"),
            teacher_id=str_arg("teacherId"),
        )
        return jsonify([waiver_to_dict(w) for w in waivers])

    @app.route("/deduction-adjustments/preview", methods=["POST"], endpoint="deduction_adjustments_preview")
    def deduction_adjustments_preview():
        preview = container.waiver_service.preview(json_body())
        return jsonify(waiver_preview_to_dict(preview))

    @app.route("/deduction-adjustments", methods=["POST"], endpoint="deduction_adjustments_apply")
    def deduction_adjustments_apply():
        result = container.waiver_service.apply(json_body())
        return jsonify(waiver_result_to_dict(result)), 201

    @app.route("/deduction-adjustments", methods=["DELETE"], endpoint="deduction_adjustments_delete")
    def deduction_adjustments_delete():
        raw = request.args.get("id")
        if not raw:
            raise ValidationError("id is required", field="id")
        container.waiver_service.delete_waiver(require_int(raw, "id"))
        return jsonify({"success": True})
