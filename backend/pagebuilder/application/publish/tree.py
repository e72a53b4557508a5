"""
Draft -> master tree application. Flush only.
"""
from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module import Module
from pagebuilder.models.module_draft import ModuleDraft
from pagebuilder.models.module_translation import ModuleTranslation
from pagebuilder.models.module_translation_draft import ModuleTranslationDraft
from pagebuilder.application.drafts.seed import copy_settings
from pagebuilder.utils.order import walk_tree


def _owner_kwargs(translation):
    if translation.custom:
        return {"page_translation_id": translation.id}
    return {"page_id": translation.page_id}


def tombstone_modules(modules):
    """
    Soft deletes master modules and drops their translations.
    """
    ids = [m.id for m in modules]
    for module in modules:
        module.soft_delete()
    if ids:
        ModuleTranslation.query.filter(ModuleTranslation.module_id.in_(ids)).delete(
            synchronize_session=False
        )
    db.session.flush()
    return len(ids)


def copy_master_tree(sources, language, **owner):
    """
    Clones active master modules, with their content in `language`, into
    new modules of another owner (page_id or page_translation_id).
    """
    contents = {
        mt.module_id: mt
        for mt in ModuleTranslation.find_all_by_modules([m.id for m in sources], language)
    }

    copies = {}
    for source, _depth in walk_tree(sources):
        module = Module(**owner)
        module.type = source.type
        module.settings = copy_settings(source.settings)
        module.sort = source.sort
        db.session.add(module)
        copies[source.id] = module
    db.session.flush()

    for source in sources:
        module = copies[source.id]
        if source.parent_id in copies:
            module.parent_id = copies[source.parent_id].id
        content = contents.get(source.id)
        if content:
            mt = ModuleTranslation()
            mt.module_id = module.id
            mt.language = language
            mt.settings = copy_settings(content.settings)
            mt.status = content.status
            db.session.add(mt)
    db.session.flush()
    return len(copies)


def apply_draft_tree(draft, translation):
    """
    Makes the active master tree of the translation's owner equal to the
    draft's structural rows.

    Returns a dict with:
    - created: draft row id -> new master id
    - lineage: lineage key -> new master id
    - updated / deleted counts
    """
    language = translation.language
    masters = Module.find_all_active_for(translation)
    by_id = {m.id: m for m in masters}

    rows = [row for row, _ in walk_tree(ModuleDraft.find_all_saved_by_page_draft(draft.id))]

    row_to_master = {}
    claimed = set()
    created = {}
    lineage = {}
    updated = 0

    for row in rows:
        master = by_id.get(row.original_module_id) if row.original_module_id else None
        if master is not None and master.id not in claimed:
            if (master.type, master.settings, master.sort) != (row.type, row.settings, row.sort):
                master.type = row.type
                master.settings = copy_settings(row.settings)
                master.sort = row.sort
                updated += 1
            row_to_master[row.id] = master
            claimed.add(master.id)
            continue

        # never published, or its master vanished meanwhile
        master = Module(**_owner_kwargs(translation))
        master.type = row.type
        master.settings = copy_settings(row.settings)
        master.sort = row.sort
        db.session.add(master)
        row_to_master[row.id] = master

    db.session.flush()

    for row in rows:
        master = row_to_master[row.id]
        if master.id not in by_id:
            created[row.id] = master.id
            if row.lineage_key:
                lineage[row.lineage_key] = master.id
        parent = row_to_master.get(row.parent_id) if row.parent_id else None
        parent_id = parent.id if parent else None
        if master.parent_id != parent_id:
            master.parent_id = parent_id

    kept = {m.id for m in row_to_master.values()}
    deleted = tombstone_modules([m for m in masters if m.id not in kept])

    # content in the published language
    for row in rows:
        td = ModuleTranslationDraft.find_by_module_draft_and_language(row.id, language)
        if td is None:
            continue
        master = row_to_master[row.id]
        mt = ModuleTranslation.find_by_module(master.id, language)
        if mt is None:
            mt = ModuleTranslation()
            mt.module_id = master.id
            mt.language = language
            db.session.add(mt)
        mt.settings = copy_settings(td.settings)
        mt.status = td.status

    db.session.flush()

    current_app.logger.debug(
        "Applied draft %s: %s created, %s updated, %s deleted",
        draft.id, len(created), updated, deleted,
    )
    return {
        "created": created,
        "lineage": lineage,
        "updated": updated,
        "deleted": deleted,
    }
