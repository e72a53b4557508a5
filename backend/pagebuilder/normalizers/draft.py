from pagebuilder.models.module_draft import ModuleDraft
from .module import normalize_module_draft


def normalize_draft(draft, include_modules=True):
    data = {
        "id": draft.id,
        "userId": draft.user_id,
        "pageId": draft.page_id,
        "pageTranslationId": draft.page_translation_id,
        "language": draft.language,
        "baseVersion": draft.base_version,
        "masterVersion": draft.translation.version,
        "hasConflict": draft.has_conflict,
        "title": draft.title,
        "slug": draft.slug,
        "description": draft.description,
        "keywords": draft.keywords,
        "deletedModuleIds": draft.deleted_module_ids or [],
    }

    if include_modules:
        data["modules"] = [
            normalize_module_draft(row, draft.language)
            for row in ModuleDraft.find_all_by_page_draft(draft.id)
        ]

    return data


def normalize_draft_status(status):
    return {
        "hasDraft": status["hasDraft"],
        "hasConflict": status["hasConflict"],
        "baseVersion": status["baseVersion"],
        "masterVersion": status["masterVersion"],
        "draft": normalize_draft(status["draft"]) if status["draft"] else None,
    }
