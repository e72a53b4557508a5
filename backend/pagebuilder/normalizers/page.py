def normalize_translation(translation):
    return {
        "id": translation.id,
        "pageId": translation.page_id,
        "language": translation.language,
        "slug": translation.slug,
        "title": translation.title,
        "description": translation.description,
        "keywords": translation.keywords,
        "custom": translation.custom,
        "version": translation.version,
    }


def normalize_page(page, admin=False):
    return {
        "id": page.id,
        "name": page.name,
        "parentId": page.parent_id,
        "is404": page.is_404,
        "isHomepage": page.is_homepage,
        "translations": [normalize_translation(t) for t in page.translations],
        "deletedAt": page.deleted_at.isoformat() if admin and page.deleted_at else None,
    }
