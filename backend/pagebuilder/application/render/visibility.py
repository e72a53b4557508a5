from typing import Any, Dict, List

from pagebuilder.models.module import Module
from pagebuilder.models.module_translation import ModuleTranslation, TranslationStatus
from pagebuilder.utils.order import children_by_parent, sort_key
from pagebuilder.application.drafts.access import load_translation

# Statuses the public never sees
PUBLIC_EXCLUDED = {TranslationStatus.HIDDEN.value, TranslationStatus.PENDING.value}


def is_publicly_visible(module_translation) -> bool:
    if module_translation is None:
        return True
    return module_translation.status not in PUBLIC_EXCLUDED


def _node(module, module_translation, children):
    settings = dict(module.settings or {})
    if module_translation is not None:
        settings.update(module_translation.settings or {})
    return {
        "id": module.id,
        "type": module.type,
        "sort": module.sort,
        "settings": settings,
        "status": module_translation.status if module_translation else TranslationStatus.TRANSLATED.value,
        "children": children,
    }


def render_modules(translation, for_public: bool) -> List[Dict[str, Any]]:
    """
    Builds the published module tree of a translation.

    For the public, a HIDDEN or PENDING module disappears together with
    everything nested in it. Editors see the whole tree.
    """
    modules = Module.find_all_active_for(translation)
    translations = {
        mt.module_id: mt
        for mt in ModuleTranslation.find_all_by_modules([m.id for m in modules], translation.language)
    }
    ids = {m.id for m in modules}
    grouped = children_by_parent(modules)

    def build(module):
        mt = translations.get(module.id)
        if for_public and not is_publicly_visible(mt):
            return None
        children = [child for child in (build(c) for c in grouped.get(module.id, [])) if child]
        return _node(module, mt, children)

    roots = sorted(
        (m for m in modules if m.parent_id is None or m.parent_id not in ids),
        key=sort_key,
    )
    return [node for node in (build(root) for root in roots) if node]


def render_translation(*, translation_id: str, for_public: bool = True) -> Dict[str, Any]:
    translation = load_translation(translation_id)
    return {
        "translationId": translation.id,
        "language": translation.language,
        "slug": translation.slug,
        "title": translation.title,
        "version": translation.version,
        "modules": render_modules(translation, for_public),
    }
