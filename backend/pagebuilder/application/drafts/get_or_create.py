from typing import Any, Dict, Tuple
from flask import current_app

from pagebuilder.models.page_draft import PageDraft
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.sync.structure import clone_into_new_draft
from .access import load_translation
from .seed import new_draft, purge_scratch, seed_from_master


def ensure_draft(user_id, translation, *, purge=True) -> Tuple[PageDraft, bool]:
    """
    Returns (draft, created). Flush only.

    A new draft of a shared-layout translation is cloned from a sibling
    shared-layout draft of the same user when one exists, otherwise it is
    seeded from the published tree.
    """
    draft = PageDraft.find_by_user_and_page_translation(str(user_id), translation.id)
    if draft:
        if purge:
            removed = purge_scratch(draft)
            if removed:
                current_app.logger.debug("Purged %s scratch modules from draft %s", removed, draft.id)
        return draft, False

    draft = clone_into_new_draft(user_id, translation)
    source = "sibling"
    if draft is None:
        draft = new_draft(user_id, translation)
        seed_from_master(draft, translation)
        source = "master"

    log_action(
        action="draft.create",
        entity_type="page_draft",
        entity_id=draft.id,
        payload={"translation_id": translation.id, "base_version": draft.base_version, "source": source},
        actor_id=str(user_id),
    )
    current_app.logger.info(
        "Created draft %s for user %s on translation %s from %s",
        draft.id, user_id, translation.id, source,
    )
    return draft, True


def get_or_create_draft(
    *,
    user_id: str,
    translation_id: str,
) -> PageDraft:
    """
    Returns the user's draft of a translation, creating it when missing.

    Responsibilities:
    - transactional boundary
    - scratch cleanup on every call
    - seeding / cloning of new drafts
    """
    translation = load_translation(translation_id)

    with transactional():
        draft, _created = ensure_draft(user_id, translation)

    return draft


def draft_status(
    *,
    user_id: str,
    translation_id: str,
) -> Dict[str, Any]:
    translation = load_translation(translation_id)

    with transactional():
        draft = PageDraft.find_by_user_and_page_translation(str(user_id), translation.id)
        if draft:
            purge_scratch(draft)

    return {
        "hasDraft": draft is not None,
        "hasConflict": bool(draft and draft.has_conflict),
        "baseVersion": draft.base_version if draft else None,
        "masterVersion": translation.version,
        "draft": draft,
    }
