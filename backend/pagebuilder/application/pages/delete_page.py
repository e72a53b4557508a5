from typing import Optional
from flask import current_app
from pagebuilder.models.module import Module
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.domain.exceptions import Conflict, Forbidden
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.drafts.access import load_page
from pagebuilder.application.drafts.seed import teardown_draft
from pagebuilder.application.publish.tree import tombstone_modules


def delete_page(
    *,
    page_id: str,
    actor_id: Optional[str],
) -> None:
    """
    Soft-delete a page.

    Notes:
    - The homepage and pages with children are refused
    - Modules (shared and custom) are tombstoned
    - Drafts of every translation are dropped
    """
    page = load_page(page_id)

    if page.is_homepage:
        raise Forbidden("HOMEPAGE_CANNOT_BE_DELETED", "The homepage cannot be deleted")
    if page.active_children():
        raise Conflict("PAGE_HAS_CHILDREN", "Delete or move the child pages first")

    with transactional():
        modules = Module.find_all_active_by_page(page.id)
        for translation in PageTranslation.find_all_by_page(page.id):
            modules.extend(Module.find_all_active_by_translation(translation.id))
        tombstoned = tombstone_modules(modules)

        drafts = PageDraft.find_all_by_page(page.id)
        for draft in drafts:
            teardown_draft(draft)

        page.soft_delete()

        log_action(
            action="page.delete",
            entity_type="page",
            entity_id=page_id,
            payload={
                "modules": tombstoned,
                "drafts": len(drafts),
            },
            actor_id=actor_id,
        )

    current_app.logger.info("Page %s deleted (%s modules tombstoned)", page_id, tombstoned)
