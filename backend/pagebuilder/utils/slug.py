import re
import unicodedata
from pagebuilder.models.page_translation import PageTranslation

SLUG_RE = re.compile(r"[^a-z0-9\-]+")


def slugify(name: str) -> str:
    s = unicodedata.normalize("NFKD", name or "")
    s = s.encode("ascii", "ignore").decode("ascii").lower().replace("_", "-")
    s = SLUG_RE.sub("-", s)
    s = re.sub(r"-{2,}", "-", s).strip("-")
    return "/" + (s or "page")


def slug_taken(language, slug, ignore_id=None):
    query = PageTranslation.query.filter_by(language=language, slug=slug)
    if ignore_id:
        query = query.filter(PageTranslation.id != ignore_id)
    return query.first() is not None


def free_slug(language, base):
    """First of base, base-2, base-3, ... not taken in language."""
    slug = base
    n = 1
    while slug_taken(language, slug):
        n += 1
        slug = f"{base}-{n}"
    return slug


def unique_slug(language, name):
    return free_slug(language, slugify(name))
