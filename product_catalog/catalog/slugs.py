"""Slug generation for categories."""

import re
import unicodedata
from uuid import uuid4

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s_]+")


def generate_slug(text: str | None, max_length: int = 100) -> str:
    """Convert text to a URL-safe slug.

    Accented Latin characters are reduced to ASCII; characters without
    an ASCII form are dropped. Text that leaves nothing behind gets a
    random ``category-xxxxxxxx`` slug.

    Args:
        text: Source text, usually the category name.
        max_length: Maximum slug length.

    Returns:
        Lowercase slug of ASCII letters, digits and single dashes.
    """
    slug = ""
    if text:
        slug = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
        slug = _NON_WORD.sub("", slug.lower())
        slug = _SEPARATORS.sub("-", slug).strip("-")

    if not slug:
        return f"category-{uuid4().hex[:8]}"

    return slug[:max_length].rstrip("-")


def with_suffix(slug: str, number: int, max_length: int = 100) -> str:
    """Append ``-<number>`` to a slug, keeping it within max_length."""
    suffix = f"-{number}"
    return f"{slug[: max_length - len(suffix)].rstrip('-')}{suffix}"
