from flask import current_app
from pagebuilder.models.page import Page
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.domain.exceptions import Forbidden, NotFound


def load_page(page_id) -> Page:
    page = Page.find_active(page_id)
    if not page:
        raise NotFound("PAGE_NOT_FOUND", "Page not found")
    return page


def load_translation(translation_id) -> PageTranslation:
    translation = PageTranslation.query.filter_by(id=translation_id).first()
    if not translation or translation.page.is_deleted:
        raise NotFound("TRANSLATION_NOT_FOUND", "Translation not found")
    return translation


def load_draft(draft_id, user_id) -> PageDraft:
    """
    Fetches a draft owned by user_id.

    A draft of another user is reported as ACCESS_DENIED rather than
    not found, so editors learn that somebody else is working on it.
    """
    draft = PageDraft.query.filter_by(id=draft_id).first()
    if not draft:
        raise NotFound("DRAFT_NOT_FOUND", "Draft not found")
    if draft.user_id != str(user_id):
        current_app.logger.warning("User %s denied access to draft %s", user_id, draft_id)
        raise Forbidden("ACCESS_DENIED", "Draft belongs to another user")
    return draft
