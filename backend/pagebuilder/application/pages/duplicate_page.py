from typing import Optional, Tuple
from flask import current_app
from sqlalchemy.exc import IntegrityError
from pagebuilder.extensions import db
from pagebuilder.models.module import Module
from pagebuilder.models.page import Page
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.domain.exceptions import Conflict, NotFound
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.slug import free_slug
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.drafts.access import load_page
from pagebuilder.application.publish.tree import copy_master_tree

COPY_NAME_SUFFIX = " (kopie)"
COPY_SLUG_SUFFIX = "-copy"


def duplicate_page(
    *,
    actor_id: Optional[str],
    page_id: str,
    language: Optional[str] = None,
) -> Tuple[Page, PageTranslation]:
    """
    Copies a page with one translation and its published module tree.

    Notes:
    - The copy sits under the same parent and is never homepage or 404
    - The slug gets a -copy suffix, made unique per language
    - Drafts are not copied
    """
    page = load_page(page_id)
    language = language or current_app.config["DEFAULT_LANGUAGE"]

    source = PageTranslation.query.filter_by(page_id=page.id, language=language).first()
    if not source:
        raise NotFound("TRANSLATION_NOT_FOUND", f"Page has no {language} translation", language=language)

    copy = Page()
    copy.name = f"{page.name}{COPY_NAME_SUFFIX}"
    copy.parent_id = page.parent_id
    copy.is_404 = False
    copy.is_homepage = False

    translation = PageTranslation()
    translation.language = language
    translation.title = source.title
    translation.slug = free_slug(language, f"{source.slug.rstrip('/') or '/page'}{COPY_SLUG_SUFFIX}")
    translation.description = source.description
    translation.keywords = source.keywords
    translation.custom = source.custom
    translation.version = 1

    try:
        with transactional():
            db.session.add(copy)
            db.session.flush()

            translation.page_id = copy.id
            db.session.add(translation)
            db.session.flush()

            if source.custom:
                modules = copy_master_tree(
                    Module.find_all_active_by_translation(source.id),
                    language,
                    page_translation_id=translation.id,
                )
            else:
                modules = copy_master_tree(
                    Module.find_all_active_by_page(page.id),
                    language,
                    page_id=copy.id,
                )

            log_action(
                action="page.duplicate",
                entity_type="page",
                entity_id=copy.id,
                payload={
                    "source": page.id,
                    "language": language,
                    "slug": translation.slug,
                    "modules": modules,
                },
                actor_id=actor_id,
            )

    except IntegrityError as exc:
        raise Conflict("SLUG_EXISTS", "A page with this slug already exists") from exc

    current_app.logger.info("Page %s duplicated as %s (%s modules)", page.id, copy.id, modules)
    return copy, translation

