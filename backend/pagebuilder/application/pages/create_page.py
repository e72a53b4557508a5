from typing import Optional, Tuple
from flask import current_app
from sqlalchemy.exc import IntegrityError
from pagebuilder.extensions import db
from pagebuilder.models.page import Page
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.domain.exceptions import Conflict, NotFound, ValidationError
from pagebuilder.utils.audit import log_action
from pagebuilder.domain.invariants.page import assert_slug
from pagebuilder.utils.slug import slug_taken, unique_slug
from pagebuilder.utils.transaction import transactional


def page_404_exists(*, parent_id: Optional[str] = None) -> bool:
    """
    404 pages are unique site-wide, so without parent_id any 404 page counts.
    With parent_id only a 404 page directly under that parent does.
    """
    query = Page.query.filter_by(is_404=True, deleted_at=None)
    if parent_id:
        query = query.filter_by(parent_id=parent_id)
    return query.first() is not None


def create_page(
    *,
    actor_id: Optional[str],
    name: str,
    language: Optional[str] = None,
    parent_id: Optional[str] = None,
    is_404: bool = False,
    slug: Optional[str] = None,
) -> Tuple[Page, PageTranslation]:
    """
    Create a page together with its first translation.

    Edge cases handled:
    - Missing name
    - Unknown parent
    - A second 404 page
    - Slug collisions (suffixed -2, -3, ...)
    - The first root page becomes the homepage
    """
    if not name or not name.strip():
        raise ValidationError("INVALID_NAME", "Page name is required")

    language = language or current_app.config["DEFAULT_LANGUAGE"]

    if parent_id and not Page.find_active(parent_id):
        raise NotFound("PAGE_NOT_FOUND", "Parent page not found", parentId=parent_id)

    if slug is not None:
        assert_slug(slug)
        if slug_taken(language, slug):
            raise Conflict("SLUG_EXISTS", f"Slug {slug} already exists", slug=slug)

    if is_404 and page_404_exists():
        raise Conflict("404_ALREADY_EXISTS", "A 404 page already exists")

    page = Page()
    page.name = name.strip()
    page.parent_id = parent_id
    page.is_404 = bool(is_404)
    page.is_homepage = (
        parent_id is None
        and not is_404
        and Page.query.filter_by(parent_id=None, is_404=False, deleted_at=None).first() is None
    )

    translation = PageTranslation()
    translation.language = language
    translation.title = page.name
    translation.slug = slug or unique_slug(language, page.name)
    translation.description = ""
    translation.keywords = ""
    translation.custom = False
    translation.version = 1

    try:
        with transactional():
            db.session.add(page)
            db.session.flush()  # ensures page.id is available

            translation.page_id = page.id
            db.session.add(translation)
            db.session.flush()

            log_action(
                action="page.create",
                entity_type="page",
                entity_id=page.id,
                payload={
                    "name": page.name,
                    "language": language,
                    "slug": translation.slug,
                    "is_404": page.is_404,
                    "is_homepage": page.is_homepage,
                },
                actor_id=actor_id,
            )

        return page, translation

    except IntegrityError as exc:
        # (language, slug) taken by a concurrent request
        raise Conflict("SLUG_EXISTS", "A page with this slug already exists") from exc
