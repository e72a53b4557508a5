from typing import Any, Dict
from flask import current_app

from pagebuilder.domain.exceptions import ValidationError
from pagebuilder.domain.invariants.page import assert_slug
from pagebuilder.models.page_draft import PageDraft
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional
from .access import load_draft
from .seed import teardown_draft


ALLOWED_META_FIELDS = ("title", "slug", "description", "keywords")


def update_draft(
    *,
    user_id: str,
    draft_id: str,
    data: Dict[str, Any],
) -> PageDraft:
    """
    Edits the draft copy of the translation meta. The slug is only
    checked for shape here; uniqueness is enforced when publishing.
    """
    draft = load_draft(draft_id, user_id)

    changed_fields: list[str] = []

    with transactional():
        for field in ALLOWED_META_FIELDS:
            if field in data and getattr(draft, field) != data[field]:
                if field == "slug":
                    assert_slug(data[field])
                elif field == "title" and not data[field]:
                    raise ValidationError("INVALID_TITLE", "Title must not be empty")
                setattr(draft, field, data[field])
                changed_fields.append(field)

        if changed_fields:
            log_action(
                action="draft.update",
                entity_type="page_draft",
                entity_id=draft.id,
                payload={"fields": changed_fields},
                actor_id=str(user_id),
            )

    return draft


def discard_draft(
    *,
    user_id: str,
    draft_id: str,
) -> None:
    draft = load_draft(draft_id, user_id)

    with transactional():
        log_action(
            action="draft.discard",
            entity_type="page_draft",
            entity_id=draft.id,
            payload={"translation_id": draft.page_translation_id},
            actor_id=str(user_id),
        )
        teardown_draft(draft)

    current_app.logger.info("Draft %s discarded by user %s", draft_id, user_id)
