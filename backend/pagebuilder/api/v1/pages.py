# pagebuilder/api/v1/pages.py
from flask import g, request, jsonify
from flask_jwt_extended import jwt_required
from pagebuilder.utils.decorators import current_user
from pagebuilder.application.drafts.access import load_page
from pagebuilder.application.pages.create_page import create_page, page_404_exists
from pagebuilder.application.pages.create_translation import create_translation
from pagebuilder.application.pages.update_translation import update_translation
from pagebuilder.application.pages.delete_page import delete_page
from pagebuilder.application.pages.duplicate_page import duplicate_page
from pagebuilder.normalizers.page import normalize_page, normalize_translation
from . import v1_bp


# ------------------------
# Pages
# ------------------------

@v1_bp.route("/pages", methods=["POST"])
@jwt_required()
@current_user
def create_page_route():
    data = request.get_json(silent=True) or {}

    page, translation = create_page(
        actor_id=g.current_user_id,
        name=data.get("name", ""),
        language=data.get("language"),
        parent_id=data.get("parentId"),
        is_404=bool(data.get("is404", False)),
        slug=data.get("slug"),
    )

    return jsonify({
        "page": normalize_page(page),
        "translation": normalize_translation(translation),
    }), 201


@v1_bp.route("/pages/<page_id>", methods=["GET"])
@jwt_required()
def get_page(page_id):
    return jsonify(normalize_page(load_page(page_id), admin=True))


@v1_bp.route("/pages/<page_id>", methods=["DELETE"])
@jwt_required()
@current_user
def delete_page_route(page_id):
    delete_page(page_id=page_id, actor_id=g.current_user_id)
    return jsonify({"message": "Page deleted successfully"}), 200


@v1_bp.route("/pages/<page_id>/duplicate", methods=["POST"])
@jwt_required()
@current_user
def duplicate_page_route(page_id):
    data = request.get_json(silent=True) or {}

    page, translation = duplicate_page(
        actor_id=g.current_user_id,
        page_id=page_id,
        language=data.get("language"),
    )

    return jsonify({
        "page": normalize_page(page),
        "translation": normalize_translation(translation),
    }), 201


@v1_bp.route("/pages/404-exists", methods=["GET"])
@jwt_required()
def page_404_exists_route():
    return jsonify({"exists": page_404_exists(parent_id=request.args.get("parentId"))}), 200


# ------------------------
# Translations
# ------------------------

@v1_bp.route("/pages/<page_id>/translations", methods=["POST"])
@jwt_required()
@current_user
def create_translation_route(page_id):
    data = request.get_json(silent=True) or {}

    translation = create_translation(
        actor_id=g.current_user_id,
        page_id=page_id,
        language=data.get("language", ""),
        title=data.get("title", ""),
        slug=data.get("slug", ""),
    )

    return jsonify(normalize_translation(translation)), 201


@v1_bp.route("/translations/<translation_id>", methods=["PUT"])
@jwt_required()
@current_user
def update_translation_route(translation_id):
    data = request.get_json(silent=True) or {}

    result = update_translation(
        actor_id=g.current_user_id,
        translation_id=translation_id,
        data=data,
        version=data.get("version"),
        force=bool(data.get("force", False)),
    )

    return jsonify(result), 200
