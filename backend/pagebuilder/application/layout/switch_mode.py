from typing import Any, Dict, Optional
from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module import Module
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.domain.lifecycle.layout import INHERITED, assert_layout_mode, mode_of
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.optimistic_lock import bump_version, enforce_version, lock_translation
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.drafts.access import load_translation
from pagebuilder.application.drafts.seed import teardown_draft
from pagebuilder.application.publish.tree import copy_master_tree, tombstone_modules


def switch_mode(
    *,
    translation_id: str,
    mode: str,
    copy_modules: bool = False,
    version: Optional[int] = None,
    force: bool = False,
    actor_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Switches a translation between the shared page layout (inherited)
    and its own layout (custom).

    Switching to the mode already in place changes nothing but is still
    version checked.
    """
    assert_layout_mode(mode)
    load_translation(translation_id)

    with transactional():
        translation = lock_translation(translation_id)
        enforce_version(translation, version, force)

        current = mode_of(translation)
        module_count = 0
        new_version = translation.version

        if current != mode:
            if mode == INHERITED:
                module_count = tombstone_modules(Module.find_all_active_by_translation(translation.id))
                translation.custom = False
            else:
                translation.custom = True
                if copy_modules:
                    module_count = copy_master_tree(
                        Module.find_all_active_by_page(translation.page_id),
                        translation.language,
                        page_translation_id=translation.id,
                    )
            # drafts were built against the other layout
            drafts = PageDraft.query.filter_by(page_translation_id=translation.id).all()
            for draft in drafts:
                teardown_draft(draft)

            db.session.flush()
            new_version = bump_version(translation)

            log_action(
                action="layout.switch",
                entity_type="page_translation",
                entity_id=translation.id,
                payload={
                    "from": current,
                    "to": mode,
                    "copy_modules": copy_modules,
                    "modules": module_count,
                    "drafts_dropped": len(drafts),
                },
                actor_id=actor_id,
            )
            current_app.logger.info(
                "Translation %s switched %s -> %s (%s modules)", translation.id, current, mode, module_count
            )

    return {"mode": mode, "moduleCount": module_count, "newVersion": new_version}


def layout_mode_info(*, translation_id: str) -> Dict[str, Any]:
    translation = load_translation(translation_id)
    return {
        "isCustom": translation.custom,
        "mode": mode_of(translation),
        "inheritedModuleCount": len(Module.find_all_active_by_page(translation.page_id)),
        "customModuleCount": len(Module.find_all_active_by_translation(translation.id)),
    }
