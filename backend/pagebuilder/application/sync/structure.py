"""
Cross-language structural mirroring between drafts of one user.

Only translations on the shared (inherited) layout take part; a custom
layout translation never gives or receives structure.
"""
from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module_draft import ModuleDraft
from pagebuilder.models.module_translation import ModuleTranslation, TranslationStatus
from pagebuilder.models.module_translation_draft import ModuleTranslationDraft
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.application.drafts.seed import (
    copy_settings,
    delete_module_drafts,
    new_draft,
    new_lineage_key,
)
from pagebuilder.utils.order import walk_tree
from .events import ModuleTreeChanged


def _match_rows(source_rows, target_rows):
    """
    Pairs source rows with target rows.

    Order of preference: same master module, same lineage key, then
    (type, sort) among target rows that were never published.
    """
    by_original = {r.original_module_id: r for r in target_rows if r.original_module_id}
    by_lineage = {r.lineage_key: r for r in target_rows if r.lineage_key}

    matched = {}
    used = set()

    for source in source_rows:
        target = None
        if source.original_module_id:
            target = by_original.get(source.original_module_id)
        if target is None and source.lineage_key:
            target = by_lineage.get(source.lineage_key)
        if target is not None and target.id not in used:
            matched[source.id] = target
            used.add(target.id)

    for source in source_rows:
        if source.id in matched:
            continue
        for target in target_rows:
            if (
                target.id not in used
                and target.original_module_id is None
                and target.type == source.type
                and target.sort == source.sort
            ):
                matched[source.id] = target
                used.add(target.id)
                break

    return matched


def _seed_translation(row, source, source_language, target_language):
    if source.original_module_id:
        master = ModuleTranslation.find_by_module(source.original_module_id, target_language)
        if master:
            row.translations.append(ModuleTranslationDraft(
                language=target_language,
                settings=copy_settings(master.settings),
                status=master.status,
            ))
            return

    source_td = source.translation_for(source_language)
    row.translations.append(ModuleTranslationDraft(
        language=target_language,
        settings=copy_settings(source_td.settings if source_td else {}),
        status=TranslationStatus.PENDING.value,
    ))


def mirror_structure(source: PageDraft, target: PageDraft):
    """
    Makes the structural rows of `target` mirror those of `source`.

    Content of matched rows in the target language is left alone. Returns
    a dict with created/updated/deleted counts.
    """
    source_language = source.translation.language
    target_language = target.translation.language

    source_rows = [row for row, _ in walk_tree(ModuleDraft.find_all_saved_by_page_draft(source.id))]
    target_rows = ModuleDraft.find_all_saved_by_page_draft(target.id)

    for row in source_rows:
        if not row.lineage_key:
            row.lineage_key = new_lineage_key()

    matched = _match_rows(source_rows, target_rows)
    stats = {"created": 0, "updated": 0, "deleted": 0}
    created = set()

    for source_row in source_rows:
        target_row = matched.get(source_row.id)
        if target_row is None:
            target_row = ModuleDraft()
            target_row.page_draft_id = target.id
            target_row.original_module_id = source_row.original_module_id
            target_row.type = source_row.type
            target_row.settings = copy_settings(source_row.settings)
            target_row.sort = source_row.sort
            target_row.status = source_row.status
            target_row.lineage_key = source_row.lineage_key
            db.session.add(target_row)
            _seed_translation(target_row, source_row, source_language, target_language)
            matched[source_row.id] = target_row
            created.add(source_row.id)
            stats["created"] += 1
            continue

        changed = False
        for attr in ("type", "settings", "sort"):
            value = getattr(source_row, attr)
            if getattr(target_row, attr) != value:
                setattr(target_row, attr, copy_settings(value) if attr == "settings" else value)
                changed = True
        if source_row.original_module_id and not target_row.original_module_id:
            target_row.original_module_id = source_row.original_module_id
        if not target_row.lineage_key:
            target_row.lineage_key = source_row.lineage_key
        if changed:
            target_row.mark_modified()
            stats["updated"] += 1

    db.session.flush()

    for source_row in source_rows:
        target_row = matched[source_row.id]
        parent = matched.get(source_row.parent_id) if source_row.parent_id else None
        parent_id = parent.id if parent else None
        if target_row.parent_id != parent_id:
            target_row.parent_id = parent_id
            if source_row.id not in created:
                target_row.mark_modified()

    kept = {row.id for row in matched.values()}
    doomed = [row for row in target_rows if row.id not in kept]
    if doomed:
        target.record_deleted_modules(row.original_module_id for row in doomed)
        delete_module_drafts(doomed)
        stats["deleted"] = len(doomed)

    target.record_deleted_modules(source.deleted_module_ids or [])
    db.session.flush()
    return stats


def shared_sibling_draft(user_id, translation):
    """
    A draft of the same user on a sibling shared-layout translation, if any.
    """
    if translation.custom:
        return None
    for sibling in translation.shared_siblings():
        draft = PageDraft.find_by_user_and_page_translation(str(user_id), sibling.id)
        if draft:
            return draft
    return None


def propagate_structure(event: ModuleTreeChanged):
    """
    Mirrors the saved draft into every sibling shared-layout translation
    of the same user, creating the sibling draft when missing.
    """
    source = PageDraft.query.filter_by(id=event.draft_id).first()
    translation = PageTranslation.query.filter_by(id=event.page_translation_id).first()
    if source is None or translation is None or translation.custom:
        return 0

    synced = 0
    for sibling in translation.shared_siblings():
        target = PageDraft.find_by_user_and_page_translation(event.user_id, sibling.id)
        if target is None:
            target = new_draft(event.user_id, sibling)
        stats = mirror_structure(source, target)
        current_app.logger.debug(
            "Synced draft %s -> %s (%s): %s", source.id, target.id, sibling.language, stats
        )
        synced += 1
    return synced


def clone_into_new_draft(user_id, translation):
    """
    Creates a draft for `translation` cloned from a sibling shared-layout
    draft of the same user. Returns None when there is nothing to clone.
    """
    source = shared_sibling_draft(user_id, translation)
    if source is None:
        return None
    draft = new_draft(user_id, translation)
    mirror_structure(source, draft)
    return draft
