

def normalize_module_draft(row, language=None):
    td = row.translation_for(language) if language else None
    return {
        "draftId": row.id,
        "originalModuleId": row.original_module_id,
        "parentDraftId": row.parent_id,
        "tempKey": row.temp_key,
        "type": row.type,
        "settings": row.settings or {},
        "sort": row.sort,
        "status": row.status,
        "translationSettings": td.settings if td else None,
        "translationStatus": td.status if td else None,
    }
