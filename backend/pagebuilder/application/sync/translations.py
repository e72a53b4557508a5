from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module_draft import ModuleDraft
from pagebuilder.models.module_translation import ModuleTranslation, TranslationStatus
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.application.drafts.seed import copy_settings


def seed_pending_translations(translation, modules):
    """
    For every published module and every sibling shared-layout language
    without a ModuleTranslation, adds a PENDING row carrying the published
    language's settings as fallback. Returns the number of rows created.
    """
    if translation.custom or not modules:
        return 0

    published = {
        mt.module_id: mt
        for mt in ModuleTranslation.find_all_by_modules([m.id for m in modules], translation.language)
    }

    created = 0
    for sibling in translation.shared_siblings():
        existing = {
            mt.module_id
            for mt in ModuleTranslation.find_all_by_modules([m.id for m in modules], sibling.language)
        }
        for module in modules:
            if module.id in existing:
                continue
            source = published.get(module.id)
            mt = ModuleTranslation()
            mt.module_id = module.id
            mt.language = sibling.language
            mt.settings = copy_settings(source.settings if source else {})
            mt.status = TranslationStatus.PENDING.value
            db.session.add(mt)
            created += 1

    if created:
        db.session.flush()
        current_app.logger.debug("Seeded %s pending translations for page %s", created, translation.page_id)
    return created


def backfill_original_ids(page_id, lineage_to_master, exclude_draft_id=None):
    """
    Gives sibling draft rows of a freshly published module the new master id.

    lineage_to_master: lineage key -> master module id.
    """
    if not lineage_to_master:
        return 0

    draft_ids = [d.id for d in PageDraft.find_all_by_page(page_id) if d.id != exclude_draft_id]
    if not draft_ids:
        return 0

    rows = ModuleDraft.query.filter(
        ModuleDraft.page_draft_id.in_(draft_ids),
        ModuleDraft.lineage_key.in_(list(lineage_to_master)),
        ModuleDraft.original_module_id.is_(None),
    ).all()

    for row in rows:
        row.original_module_id = lineage_to_master[row.lineage_key]

    if rows:
        db.session.flush()
        current_app.logger.debug("Backfilled %s draft rows of page %s", len(rows), page_id)
    return len(rows)
