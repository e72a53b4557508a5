# pagebuilder/application/publish/publish_draft.py
from typing import Any, Dict
from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module import Module
from pagebuilder.domain.exceptions import Conflict, VersionConflict
from pagebuilder.domain.invariants.page import assert_slug
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.optimistic_lock import bump_version, lock_translation
from pagebuilder.utils.slug import slug_taken
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.drafts.access import load_draft
from pagebuilder.application.drafts.seed import teardown_draft
from pagebuilder.application.sync.translations import backfill_original_ids, seed_pending_translations
from .tree import apply_draft_tree


META_FIELDS = ("title", "slug", "description", "keywords")


def _copy_meta(draft, translation):
    if draft.slug != translation.slug:
        assert_slug(draft.slug)
        if slug_taken(translation.language, draft.slug, ignore_id=translation.id):
            raise Conflict("SLUG_EXISTS", f"Slug {draft.slug} already exists", slug=draft.slug)

    changed = []
    for field in META_FIELDS:
        value = getattr(draft, field)
        if getattr(translation, field) != value:
            setattr(translation, field, value)
            changed.append(field)
    return changed


def publish_draft(
    *,
    user_id: str,
    draft_id: str,
    force: bool = False,
) -> Dict[str, Any]:
    """
    Publishes a draft onto the master tree of its translation.

    Responsibilities:
    - transactional boundary (all-or-nothing)
    - version conflict detection, unless forced
    - tree application, translation write and meta copy
    - compare-and-swap version bump
    - sibling backfill and pending translation seeding
    - draft teardown
    - audit logging
    """
    draft = load_draft(draft_id, user_id)

    with transactional():
        # 1️⃣ Lock the translation for the rest of the transaction
        translation = lock_translation(draft.page_translation_id)

        # 2️⃣ Conflict check
        conflicted = draft.base_version != translation.version
        if conflicted and not force:
            current_app.logger.warning(
                "Publish of draft %s rejected: base=%s master=%s",
                draft.id, draft.base_version, translation.version,
            )
            raise VersionConflict(
                "Page was modified after the draft was created",
                draftBaseVersion=draft.base_version,
                currentMasterVersion=translation.version,
            )

        # 3️⃣ Tree + content
        applied = apply_draft_tree(draft, translation)

        # 4️⃣ Meta
        changed_meta = _copy_meta(draft, translation)
        db.session.flush()

        # 5️⃣ Version bump
        new_version = bump_version(translation)

        # 6️⃣ Sibling drafts learn the new master ids
        backfilled = backfill_original_ids(draft.page_id, applied["lineage"], exclude_draft_id=draft.id)

        # 7️⃣ Other shared-layout languages get pending fallbacks
        seeded = 0
        if not translation.custom:
            seeded = seed_pending_translations(translation, Module.find_all_active_for(translation))

        log_action(
            action="draft.publish",
            entity_type="page_translation",
            entity_id=translation.id,
            payload={
                "draft_id": draft.id,
                "version": new_version,
                "forced": conflicted,
                "created": len(applied["created"]),
                "updated": applied["updated"],
                "deleted": applied["deleted"],
                "meta": changed_meta,
                "backfilled": backfilled,
                "pending_seeded": seeded,
            },
            actor_id=str(user_id),
        )

        # 8️⃣ Draft teardown
        teardown_draft(draft)

    current_app.logger.info(
        "Published draft %s onto translation %s (version %s)", draft_id, translation.id, new_version
    )

    return {
        "success": True,
        "newVersion": new_version,
        "createdModuleIds": applied["created"],
    }
