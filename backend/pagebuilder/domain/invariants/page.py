import re
from pagebuilder.domain.exceptions import ValidationError

SLUG_PATTERN = re.compile(r"^/[a-z0-9\-/]*$")


def assert_slug(slug):
    """
    Slugs are lowercase, start with "/" and never contain "--".
    """
    if not isinstance(slug, str) or not SLUG_PATTERN.match(slug) or "--" in slug:
        raise ValidationError("INVALID_SLUG", f"Invalid slug: {slug!r}", slug=slug)
