from typing import Any, Dict, Optional
from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module_draft import SCRATCH_SORT, DraftModuleStatus, ModuleDraft
from pagebuilder.models.module_translation import TranslationStatus
from pagebuilder.models.module_translation_draft import ModuleTranslationDraft
from pagebuilder.domain.exceptions import NotFound, ValidationError
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.order import descendant_ids, walk_tree
from pagebuilder.utils.transaction import transactional
from .access import load_draft, load_translation
from .get_or_create import ensure_draft
from .seed import copy_settings, new_lineage_key


def quick_create_module(
    *,
    user_id: str,
    translation_id: str,
    type: str,
    settings: Optional[Dict[str, Any]] = None,
    translation_settings: Optional[Dict[str, Any]] = None,
    language: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> ModuleDraft:
    """
    Creates a scratch module (sort = -1) in the user's draft.

    The row survives only if a later structural save picks it up; the
    next get-or-create or draft-status call purges it otherwise.
    """
    if not type:
        raise ValidationError("INVALID_MODULE", "Module type is required")

    translation = load_translation(translation_id)
    language = language or translation.language

    with transactional():
        draft, _created = ensure_draft(user_id, translation, purge=False)

        if parent_id and not ModuleDraft.find_in_draft(draft.id, parent_id):
            raise NotFound("MODULE_NOT_FOUND", "Parent module not found in draft", parentId=parent_id)

        row = ModuleDraft()
        row.page_draft_id = draft.id
        row.parent_id = parent_id
        row.type = type
        row.settings = copy_settings(settings)
        row.sort = SCRATCH_SORT
        row.status = DraftModuleStatus.CREATED.value
        row.lineage_key = new_lineage_key()
        if translation_settings is not None:
            row.translations.append(ModuleTranslationDraft(
                language=language,
                settings=copy_settings(translation_settings),
                status=TranslationStatus.TRANSLATED.value,
            ))
        db.session.add(row)
        db.session.flush()

        current_app.logger.debug("Quick-created %s module %s in draft %s", type, row.id, draft.id)

    return row


def clone_module(
    *,
    user_id: str,
    draft_id: str,
    module_draft_id: str,
) -> ModuleDraft:
    """
    Duplicates a draft module and its subtree as scratch rows.

    The copied root gets sort = -1, descendants keep their sorts. Returns
    the new root.
    """
    draft = load_draft(draft_id, user_id)
    source = ModuleDraft.find_in_draft(draft.id, module_draft_id)
    if not source:
        raise NotFound("MODULE_NOT_FOUND", "Module not found in draft", draftId=module_draft_id)

    with transactional():
        rows = ModuleDraft.find_all_by_page_draft(draft.id)
        subtree_ids = descendant_ids(rows, [source.id])
        subtree = [row for row in rows if row.id in subtree_ids]

        copies = {}
        for row, _depth in walk_tree(subtree):
            clone = ModuleDraft()
            clone.page_draft_id = draft.id
            clone.type = row.type
            clone.settings = copy_settings(row.settings)
            clone.sort = SCRATCH_SORT if row.id == source.id else row.sort
            clone.status = DraftModuleStatus.CREATED.value
            clone.lineage_key = new_lineage_key()
            for td in row.translations:
                clone.translations.append(ModuleTranslationDraft(
                    language=td.language,
                    settings=copy_settings(td.settings),
                    status=td.status,
                ))
            db.session.add(clone)
            copies[row.id] = clone

        db.session.flush()

        for row in subtree:
            clone = copies[row.id]
            if row.id == source.id:
                clone.parent_id = source.parent_id
            else:
                clone.parent_id = copies[row.parent_id].id
        db.session.flush()

        root = copies[source.id]
        log_action(
            action="draft.clone_module",
            entity_type="page_draft",
            entity_id=draft.id,
            payload={"source": source.id, "clone": root.id, "modules": len(copies)},
            actor_id=str(user_id),
        )

    return root
