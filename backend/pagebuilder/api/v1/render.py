from flask import request, jsonify
from flask_jwt_extended import jwt_required
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.domain.exceptions import NotFound
from pagebuilder.application.render.visibility import render_translation
from . import v1_bp


@v1_bp.route("/render", methods=["GET"])
def render_public():
    """Public rendering, addressed by language and slug."""
    language = request.args.get("language", "")
    slug = request.args.get("slug", "")

    translation = PageTranslation.find_by_language_and_slug(language, slug)
    if not translation or translation.page.is_deleted:
        raise NotFound("PAGE_NOT_FOUND", "Page not found")

    return jsonify(render_translation(translation_id=translation.id, for_public=True)), 200


@v1_bp.route("/translations/<translation_id>/render", methods=["GET"])
@jwt_required()
def render_for_editor(translation_id):
    for_public = request.args.get("public", "false").lower() == "true"
    return jsonify(render_translation(translation_id=translation_id, for_public=for_public)), 200
