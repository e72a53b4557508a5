"""
Flush-only helpers shared by the draft use-cases.

Nothing in here commits; callers own the transaction.
"""
import copy
import uuid

from pagebuilder.extensions import db
from pagebuilder.models.module import Module
from pagebuilder.models.module_draft import DraftModuleStatus, ModuleDraft
from pagebuilder.models.module_translation import ModuleTranslation
from pagebuilder.models.module_translation_draft import ModuleTranslationDraft
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.utils.order import descendant_ids, walk_tree


def copy_settings(settings):
    return copy.deepcopy(settings) if settings else {}


def new_lineage_key():
    return uuid.uuid4().hex


def new_draft(user_id, translation) -> PageDraft:
    draft = PageDraft()
    draft.user_id = str(user_id)
    draft.page_translation_id = translation.id
    draft.page_id = translation.page_id
    draft.base_version = translation.version
    draft.title = translation.title
    draft.slug = translation.slug
    draft.description = translation.description or ""
    draft.keywords = translation.keywords or ""
    draft.deleted_module_ids = []
    draft.translation = translation

    db.session.add(draft)
    db.session.flush()
    return draft


def seed_from_master(draft, translation):
    """
    Copies the active master tree (and its translations in the draft's
    language) into an empty draft. Returns the number of rows created.
    """
    masters = Module.find_all_active_for(translation)
    if not masters:
        return 0

    translations = {
        mt.module_id: mt
        for mt in ModuleTranslation.find_all_by_modules([m.id for m in masters], translation.language)
    }

    rows = {}
    for master, _depth in walk_tree(masters):
        row = ModuleDraft()
        row.page_draft_id = draft.id
        row.original_module_id = master.id
        row.type = master.type
        row.settings = copy_settings(master.settings)
        row.sort = master.sort
        row.status = DraftModuleStatus.UNCHANGED.value
        db.session.add(row)

        mt = translations.get(master.id)
        if mt:
            row.translations.append(ModuleTranslationDraft(
                language=mt.language,
                settings=copy_settings(mt.settings),
                status=mt.status,
            ))
        rows[master.id] = row

    db.session.flush()

    for master in masters:
        if master.parent_id and master.parent_id in rows:
            rows[master.id].parent_id = rows[master.parent_id].id
    db.session.flush()
    return len(rows)


def delete_module_drafts(rows):
    """
    Deletes draft rows. Parent links are cleared first so the self
    referencing foreign key never points at an already deleted row.
    """
    rows = list(rows)
    if not rows:
        return
    doomed = {row.id for row in rows}
    orphans = ModuleDraft.query.filter(
        ModuleDraft.parent_id.in_(doomed), ModuleDraft.id.notin_(doomed)
    ).all()
    for row in rows + orphans:
        row.parent_id = None
    db.session.flush()
    for row in rows:
        db.session.delete(row)
    db.session.flush()


def purge_scratch(draft):
    """
    Removes scratch rows (sort = -1) and everything nested under them.
    Returns the number of rows removed.
    """
    rows = ModuleDraft.find_all_by_page_draft(draft.id)
    scratch = [row.id for row in rows if row.is_scratch]
    if not scratch:
        return 0
    doomed = descendant_ids(rows, scratch)
    delete_module_drafts([row for row in rows if row.id in doomed])
    return len(doomed)


def teardown_draft(draft):
    delete_module_drafts(ModuleDraft.find_all_by_page_draft(draft.id))
    # rows are gone already, keep the cascade from revisiting them
    db.session.expire(draft, ["modules"])
    db.session.delete(draft)
    db.session.flush()
