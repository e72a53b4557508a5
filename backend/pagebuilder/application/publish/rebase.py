from collections import defaultdict
from typing import Any, Dict
from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module import Module
from pagebuilder.models.module_draft import DraftModuleStatus, ModuleDraft
from pagebuilder.models.module_translation import ModuleTranslation
from pagebuilder.models.module_translation_draft import ModuleTranslationDraft
from pagebuilder.domain.invariants.module_tree import assert_sorts
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.order import walk_tree
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.drafts.access import load_draft
from pagebuilder.application.drafts.seed import copy_settings, delete_module_drafts


def _refresh_translation(row, master_translation, language):
    if master_translation is None:
        return False
    td = row.translation_for(language)
    if td is None:
        row.translations.append(ModuleTranslationDraft(
            language=language,
            settings=copy_settings(master_translation.settings),
            status=master_translation.status,
        ))
        return True
    if td.settings != master_translation.settings or td.status != master_translation.status:
        td.settings = copy_settings(master_translation.settings)
        td.status = master_translation.status
        return True
    return False


def _resolve_sort_collisions(survivors, pulled):
    """
    Rows pulled from master give way to the user's rows: a pulled row whose
    sort is taken under its parent moves behind its siblings.
    """
    pulled_ids = {id(row) for row in pulled}
    taken = defaultdict(set)
    for row in survivors:
        if id(row) not in pulled_ids:
            taken[row.parent_id].add(row.sort)

    for row in sorted(pulled, key=lambda r: r.sort):
        siblings = taken[row.parent_id]
        if row.sort in siblings:
            row.sort = max(siblings) + 1
            row.mark_modified()
        siblings.add(row.sort)

    assert_sorts((row.id, row.parent_id, row.sort) for row in survivors)


def merge_master(draft, translation):
    """
    Pulls master changes into a draft without touching the user's edits.

    - unchanged rows are refreshed from their master
    - unchanged rows whose master vanished are dropped
    - modified rows whose master vanished become created (the original id stays)
    - master modules the draft has never seen are added
    """
    language = translation.language
    masters = Module.find_all_active_for(translation)
    by_id = {m.id: m for m in masters}
    master_translations = {
        mt.module_id: mt for mt in ModuleTranslation.find_all_by_modules(list(by_id), language)
    }

    rows = ModuleDraft.find_all_saved_by_page_draft(draft.id)
    by_original = {r.original_module_id: r for r in rows if r.original_module_id}

    stats = {"updated": 0, "deleted": 0, "added": 0}
    refreshed = []
    doomed = []

    for row in rows:
        if not row.original_module_id:
            continue
        master = by_id.get(row.original_module_id)
        if master is None:
            if row.status == DraftModuleStatus.UNCHANGED.value:
                doomed.append(row)
            else:
                row.status = DraftModuleStatus.CREATED.value
            continue
        if row.status != DraftModuleStatus.UNCHANGED.value:
            continue

        changed = (row.type, row.settings, row.sort) != (master.type, master.settings, master.sort)
        if changed:
            row.type = master.type
            row.settings = copy_settings(master.settings)
            row.sort = master.sort
        if _refresh_translation(row, master_translations.get(master.id), language):
            changed = True
        if changed:
            stats["updated"] += 1
        refreshed.append(row)

    seen = set(by_original) | set(draft.deleted_module_ids or [])
    added = []
    for master, _depth in walk_tree(masters):
        if master.id in seen:
            continue
        row = ModuleDraft()
        row.page_draft_id = draft.id
        row.original_module_id = master.id
        row.type = master.type
        row.settings = copy_settings(master.settings)
        row.sort = master.sort
        row.status = DraftModuleStatus.UNCHANGED.value
        _refresh_translation(row, master_translations.get(master.id), language)
        db.session.add(row)
        by_original[master.id] = row
        added.append(row)
    stats["added"] = len(added)

    db.session.flush()

    for row in refreshed + added:
        master = by_id[row.original_module_id]
        parent = by_original.get(master.parent_id) if master.parent_id else None
        if parent is not None and parent in doomed:
            parent = None
        row.parent_id = parent.id if parent else None

    survivors = [r for r in rows if r not in doomed] + added
    _resolve_sort_collisions(survivors, refreshed + added)

    if doomed:
        delete_module_drafts(doomed)
        stats["deleted"] = len(doomed)

    db.session.flush()
    return stats


def rebase_draft(
    *,
    user_id: str,
    draft_id: str,
    merge: bool = False,
) -> Dict[str, Any]:
    """
    Moves the draft's base version to the current master version, so a
    following publish no longer reports a conflict. With merge=True the
    master changes are pulled into the draft as well.
    """
    draft = load_draft(draft_id, user_id)
    translation = draft.translation

    with transactional():
        stats = {"updated": 0, "deleted": 0, "added": 0}
        if merge:
            stats = merge_master(draft, translation)

        previous = draft.base_version
        draft.base_version = translation.version

        log_action(
            action="draft.rebase",
            entity_type="page_draft",
            entity_id=draft.id,
            payload={"from": previous, "to": translation.version, "merge": merge, **stats},
            actor_id=str(user_id),
        )

    current_app.logger.info("Draft %s rebased %s -> %s", draft_id, previous, draft.base_version)

    return {
        "baseVersion": draft.base_version,
        "modulesUpdated": stats["updated"],
        "modulesDeleted": stats["deleted"],
        "modulesAdded": stats["added"],
    }
