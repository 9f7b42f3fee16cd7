import re
import unicodedata
from typing import Optional

FALLBACK_SLUG = "produto"


def slugify(name: str) -> str:
    """Lowercase, ASCII-folded, hyphen-separated form of a name."""
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", folded.lower()).strip("-")
    return slug or FALLBACK_SLUG


def generate_slug(repository, name: str, store_id: Optional[str], exclude_id: Optional[int] = None) -> str:
    """
    Slug for name that is free within the store scope.

    Collisions get a numeric suffix: pizza, pizza-1, pizza-2, ...
    """
    base_slug = slugify(name)
    slug = base_slug
    counter = 1
    while repository.slug_exists(slug, store_id, exclude_id):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug
