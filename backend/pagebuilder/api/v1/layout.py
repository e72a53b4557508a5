from flask import g, request, jsonify
from flask_jwt_extended import jwt_required
from pagebuilder.utils.decorators import current_user
from pagebuilder.application.layout.switch_mode import layout_mode_info, switch_mode
from . import v1_bp


@v1_bp.route("/translations/<translation_id>/layout", methods=["GET"])
@jwt_required()
def layout_info_route(translation_id):
    return jsonify(layout_mode_info(translation_id=translation_id)), 200


@v1_bp.route("/translations/<translation_id>/layout", methods=["PUT"])
@jwt_required()
@current_user
def switch_layout_route(translation_id):
    data = request.get_json(silent=True) or {}

    result = switch_mode(
        translation_id=translation_id,
        mode=data.get("mode", ""),
        copy_modules=bool(data.get("copyModules", False)),
        version=data.get("version"),
        force=bool(data.get("force", False)),
        actor_id=g.current_user_id,
    )

    return jsonify(result), 200
