from typing import Optional
from flask import current_app
from pagebuilder.extensions import db
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.domain.exceptions import Conflict, ValidationError
from pagebuilder.domain.invariants.page import assert_slug
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.slug import slug_taken
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.drafts.access import load_page
from pagebuilder.application.sync.structure import clone_into_new_draft


def create_translation(
    *,
    actor_id: Optional[str],
    page_id: str,
    language: str,
    title: str,
    slug: str,
) -> PageTranslation:
    """
    Adds a language to a page.

    The translation starts on the shared layout, so every user who is
    editing a sibling shared-layout translation gets a draft for it too.
    """
    page = load_page(page_id)

    if not language:
        raise ValidationError("INVALID_LANGUAGE", "Language is required")
    if not title:
        raise ValidationError("INVALID_TITLE", "Title is required")
    if PageTranslation.query.filter_by(page_id=page.id, language=language).first():
        raise Conflict(
            "TRANSLATION_ALREADY_EXISTS",
            f"Page already has a {language} translation",
            language=language,
        )
    assert_slug(slug)
    if slug_taken(language, slug):
        raise Conflict("SLUG_EXISTS", f"Slug {slug} already exists", slug=slug)

    translation = PageTranslation()
    translation.page_id = page.id
    translation.language = language
    translation.title = title
    translation.slug = slug
    translation.description = ""
    translation.keywords = ""
    translation.custom = False
    translation.version = 1

    with transactional():
        db.session.add(translation)
        db.session.flush()

        editors = {d.user_id for d in PageDraft.find_all_by_page(page.id)}
        cloned = 0
        for user_id in sorted(editors):
            if clone_into_new_draft(user_id, translation) is not None:
                cloned += 1

        log_action(
            action="translation.create",
            entity_type="page_translation",
            entity_id=translation.id,
            payload={"page_id": page.id, "language": language, "slug": slug, "cloned_drafts": cloned},
            actor_id=actor_id,
        )

    current_app.logger.info(
        "Translation %s (%s) added to page %s, %s drafts cloned", translation.id, language, page.id, cloned
    )
    return translation
