from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body, str_arg
from ..container import Container
from ..presentation.serializers import effective_amounts_to_dict, package_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/base-deduction", methods=["GET"], endpoint="base_deduction_list")
    def base_deduction_list():
        package_name = str_arg("packageName")
        if package_name:
            # Same snapshot lookup the resolver uses for lateness and absence exports.
            amounts = container.analytics_service.build_resolver(apply_waivers=False).effective_amounts(package_name)
            return jsonify(effective_amounts_to_dict(amounts, container.settings.currency))
        return jsonify([package_to_dict(p) for p in container.package_service.list_base_amounts()])

    @app.route("/base-deduction", methods=["POST"], endpoint="base_deduction_create")
    def base_deduction_create():
        amount = container.package_service.create_base_amount(json_body())
        return jsonify(package_to_dict(amount)), 201

    @app.route("/base-deduction", methods=["PUT"], endpoint="base_deduction_upsert")
    def base_deduction_upsert():
        amount = container.package_service.upsert_base_amount(json_body())
        return jsonify(package_to_dict(amount))

    @app.route("/base-deduction", methods=["DELETE"], endpoint="base_deduction_delete")
    def base_deduction_delete():
        container.package_service.delete_base_amount(request.args.get("packageName") or "")
        return jsonify({"success": True})
