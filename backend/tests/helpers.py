from pagebuilder.models.module import Module
from pagebuilder.models.module_draft import ModuleDraft

EDITOR = "user-1"
OTHER_EDITOR = "user-2"


def module(ref, type, sort, parent=None, settings=None, translation=None, **extra):
    """
    Builds a client module descriptor.

    ref / parent are (kind, value) pairs, kind being draft, original or temp.
    """
    keys = {"draft": "draftId", "original": "originalModuleId", "temp": "tempKey"}
    parent_keys = {"draft": "parentDraftId", "original": "parentOriginalModuleId", "temp": "parentTempKey"}

    data = {keys[ref[0]]: ref[1], "type": type, "sort": sort, "settings": settings or {}}
    if parent is not None:
        data[parent_keys[parent[0]]] = parent[1]
    if translation is not None:
        data["translationSettings"] = translation
    data.update(extra)
    return data


def draft_rows(draft_id):
    return ModuleDraft.find_all_by_page_draft(draft_id)


def active_masters(translation):
    return Module.find_all_active_for(translation)


def by_type(modules):
    return {m.type: m for m in modules}
