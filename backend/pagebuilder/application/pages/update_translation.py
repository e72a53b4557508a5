from typing import Any, Dict, Optional
from pagebuilder.extensions import db
from pagebuilder.domain.exceptions import Conflict, ValidationError
from pagebuilder.domain.invariants.page import assert_slug
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.optimistic_lock import bump_version, enforce_version, lock_translation
from pagebuilder.utils.slug import slug_taken
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.drafts.access import load_translation


ALLOWED_UPDATE_FIELDS = ("title", "slug", "description", "keywords")


def update_translation(
    *,
    actor_id: Optional[str],
    translation_id: str,
    data: Dict[str, Any],
    version: Optional[int] = None,
    force: bool = False,
) -> Dict[str, Any]:
    """
    Update mutable fields on a translation.

    Design rules:
    - Only whitelisted fields are mutable
    - No silent no-op updates
    - Version checked unless forced, bumped on success
    """
    load_translation(translation_id)

    changed_fields: list[str] = []

    with transactional():
        translation = lock_translation(translation_id)
        enforce_version(translation, version, force)

        for field in ALLOWED_UPDATE_FIELDS:
            if field in data and getattr(translation, field) != data[field]:
                if field == "slug":
                    assert_slug(data[field])
                    if slug_taken(translation.language, data[field], ignore_id=translation.id):
                        raise Conflict("SLUG_EXISTS", f"Slug {data[field]} already exists", slug=data[field])
                setattr(translation, field, data[field])
                changed_fields.append(field)

        if not changed_fields:
            # Explicitly fail instead of silently succeeding
            raise ValidationError("NO_CHANGES", "No valid fields provided for update")

        db.session.flush()
        new_version = bump_version(translation)

        log_action(
            action="translation.update",
            entity_type="page_translation",
            entity_id=translation.id,
            payload={
                "fields": changed_fields,
                "version": new_version,
            },
            actor_id=actor_id,
        )

    return {"newVersion": new_version, "fields": changed_fields}
