from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body, str_arg
from ..common.validators import require_int
from ..core.exceptions import ValidationError
from ..container import Container
from ..presentation.serializers import tier_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/tier-config", methods=["GET"], endpoint="tier_config_list")
    def tier_config_list():
        tiers = container.tier_service.list_tiers(teacher_id=str_arg("teacherId"))
        return jsonify([tier_to_dict(t) for t in tiers])

    @app.route("/tier-config", methods=["POST"], endpoint="tier_config_create")
    def tier_config_create():
        tier = container.tier_service.create_tier(json_body())
        return jsonify(tier_to_dict(tier)), 201

    @app.route("/tier-config", methods=["PUT"], endpoint="tier_config_update")
    def tier_config_update():
        tier = container.tier_service.update_tier(json_body())
        return jsonify(tier_to_dict(tier))

    @app.route("/tier-config", methods=["DELETE"], endpoint="tier_config_delete")
    def tier_config_delete():
        raw = request.args.get("id")
        if not raw:
            raise ValidationError("id is required", field="id")
        container.tier_service.delete_tier(require_int(raw, "id"))
        return jsonify({"success": True})
