"""URL slugs for rewritten posts."""

from __future__ import annotations

import logging
import re
import secrets

from app.services.post_store import PostStore

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 60
DEFAULT_SLUG = "post"

TRANSLITERATION: dict[str, str] = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "yo", "ж": "zh",
    "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m", "н": "n", "о": "o",
    "п": "p", "р": "r", "с": "s", "т": "t", "у": "u", "ф": "f", "х": "h", "ц": "ts",
    "ч": "ch", "ш": "sh", "щ": "sch", "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu",
    "я": "ya", " ": "-", "_": "-",
}  # fmt: skip

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_REPEATED_HYPHENS = re.compile(r"-+")


def slugify(title: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """Transliterate ``title`` into a lowercase ``[a-z0-9-]`` slug.

    Deterministic: the same title always yields the same base slug. Titles with
    nothing transliterable (emoji only, other scripts) yield ``"post"``.
    """
    transliterated = "".join(TRANSLITERATION.get(char, char) for char in title.lower())
    slug = _INVALID_CHARS.sub("", transliterated)
    slug = _REPEATED_HYPHENS.sub("-", slug).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or DEFAULT_SLUG


async def resolve_unique_slug(store: PostStore, base_slug: str, max_attempts: int = 50) -> str:
    """Return ``base_slug`` or the first free ``base_slug-N``.

    After ``max_attempts`` taken candidates the slug gets a random hex suffix
    instead, so a burst of identical titles cannot turn into an unbounded probe
    loop. The store's unique index still has the final word at insert time.
    """
    candidate = base_slug
    for suffix in range(1, max_attempts + 1):
        if not await store.slug_exists(candidate):
            return candidate
        candidate = f"{base_slug}-{suffix}"

    fallback = f"{base_slug}-{secrets.token_hex(3)}"
    logger.warning(
        "Slug %s still taken after %d probes, using %s", base_slug, max_attempts, fallback
    )
    return fallback
