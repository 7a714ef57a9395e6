"""Slug and title normalization helpers."""

from __future__ import annotations

import random
import re
import string
from typing import Iterable, Optional

_BASE36 = string.digits + string.ascii_lowercase


def slugify(text: str) -> str:
    """Convert a string to a URL-friendly slug."""
    slug = str(text).lower().strip()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w\-]+", "", slug, flags=re.ASCII)
    slug = re.sub(r"--+", "-", slug)
    return slug.strip("-")


def generate_unique_slug(title: str, existing_slugs: Optional[Iterable[str]] = None) -> str:
    """Slugify a title, appending a random suffix if the slug is taken."""
    base_slug = slugify(title)
    existing = set(existing_slugs or ())

    if base_slug not in existing:
        return base_slug

    while True:
        suffix = "".join(random.choices(_BASE36, k=4))
        candidate = f"{base_slug}-{suffix}"
        if candidate not in existing:
            return candidate


def normalize_name(name: str) -> str:
    """Normalize a freeform identifier (e.g. "owner/repo") to slug form."""
    normalized = re.sub(r"[^a-z0-9-]", "-", name.lower())
    normalized = re.sub(r"-+", "-", normalized)
    return normalized.strip("-")


def title_words(title: str) -> list[str]:
    """Lowercase title words with punctuation removed and short words dropped.

    Example: "Azure Verified Modules (AVM) for Terraform" ->
    ["azure", "verified", "modules", "avm", "for", "terraform"]
    """
    cleaned = re.sub(r"[^a-z0-9\s]", "", title.lower())
    return [word for word in cleaned.split() if len(word) > 2]
