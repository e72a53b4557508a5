# pagebuilder/api/v1/drafts.py
from flask import g, request, jsonify
from flask_jwt_extended import jwt_required
from pagebuilder.utils.decorators import current_user
from pagebuilder.application.drafts.access import load_draft
from pagebuilder.application.drafts.get_or_create import draft_status, get_or_create_draft
from pagebuilder.application.drafts.lifecycle import discard_draft, update_draft
from pagebuilder.application.drafts.quick_create import clone_module, quick_create_module
from pagebuilder.application.drafts.save_modules import save_modules
from pagebuilder.application.publish.publish_draft import publish_draft
from pagebuilder.application.publish.rebase import rebase_draft
from pagebuilder.normalizers.draft import normalize_draft, normalize_draft_status
from pagebuilder.normalizers.module import normalize_module_draft
from . import v1_bp


@v1_bp.route("/translations/<translation_id>/draft", methods=["POST"])
@jwt_required()
@current_user
def get_or_create_draft_route(translation_id):
    draft = get_or_create_draft(user_id=g.current_user_id, translation_id=translation_id)
    return jsonify(normalize_draft(draft)), 200


@v1_bp.route("/translations/<translation_id>/draft/status", methods=["GET"])
@jwt_required()
@current_user
def draft_status_route(translation_id):
    status = draft_status(user_id=g.current_user_id, translation_id=translation_id)
    return jsonify(normalize_draft_status(status)), 200


@v1_bp.route("/translations/<translation_id>/draft/modules", methods=["POST"])
@jwt_required()
@current_user
def quick_create_module_route(translation_id):
    data = request.get_json(silent=True) or {}

    row = quick_create_module(
        user_id=g.current_user_id,
        translation_id=translation_id,
        type=data.get("type", ""),
        settings=data.get("settings"),
        translation_settings=data.get("translationSettings"),
        language=data.get("language"),
        parent_id=data.get("parentDraftId"),
    )

    return jsonify(normalize_module_draft(row, data.get("language") or row.page_draft.language)), 201


@v1_bp.route("/drafts/<draft_id>", methods=["GET"])
@jwt_required()
@current_user
def get_draft(draft_id):
    return jsonify(normalize_draft(load_draft(draft_id, g.current_user_id))), 200


@v1_bp.route("/drafts/<draft_id>", methods=["PATCH"])
@jwt_required()
@current_user
def update_draft_route(draft_id):
    data = request.get_json(silent=True) or {}
    draft = update_draft(user_id=g.current_user_id, draft_id=draft_id, data=data)
    return jsonify(normalize_draft(draft, include_modules=False)), 200


@v1_bp.route("/drafts/<draft_id>", methods=["DELETE"])
@jwt_required()
@current_user
def discard_draft_route(draft_id):
    discard_draft(user_id=g.current_user_id, draft_id=draft_id)
    return jsonify({"message": "Draft discarded"}), 200


@v1_bp.route("/drafts/<draft_id>/modules", methods=["PUT"])
@jwt_required()
@current_user
def save_modules_route(draft_id):
    data = request.get_json(silent=True) or {}

    result = save_modules(
        user_id=g.current_user_id,
        draft_id=draft_id,
        modules=data.get("modules", []),
        language=data.get("language"),
    )

    return jsonify(result), 200


@v1_bp.route("/drafts/<draft_id>/modules/<module_draft_id>/clone", methods=["POST"])
@jwt_required()
@current_user
def clone_module_route(draft_id, module_draft_id):
    row = clone_module(user_id=g.current_user_id, draft_id=draft_id, module_draft_id=module_draft_id)
    return jsonify(normalize_module_draft(row, row.page_draft.language)), 201


@v1_bp.route("/drafts/<draft_id>/publish", methods=["POST"])
@jwt_required()
@current_user
def publish_draft_route(draft_id):
    data = request.get_json(silent=True) or {}
    result = publish_draft(user_id=g.current_user_id, draft_id=draft_id, force=bool(data.get("force", False)))
    return jsonify(result), 200


@v1_bp.route("/drafts/<draft_id>/rebase", methods=["POST"])
@jwt_required()
@current_user
def rebase_draft_route(draft_id):
    data = request.get_json(silent=True) or {}
    result = rebase_draft(user_id=g.current_user_id, draft_id=draft_id, merge=bool(data.get("merge", False)))
    return jsonify(result), 200
