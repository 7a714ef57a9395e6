"""Alias derivation for redirect map generation.

Each function yields candidate alias keys for one record, in priority
order. Candidates are lowercase; whether a candidate is actually registered
(first writer wins) is decided by the map builder.
"""

from __future__ import annotations

from typing import Iterator, Optional

from .config import AliasRules
from .core import CanonicalRecord
from .slugs import normalize_name, title_words


def title_alias(title: str) -> Optional[str]:
    """First significant word of a title, e.g. "Terraform Conventions" -> "terraform"."""
    words = title_words(title or "")
    return words[0] if words else None


def strip_suffixes(slug: str, suffixes: tuple[str, ...]) -> str:
    """Remove known trailing suffixes, applied in order."""
    for suffix in suffixes:
        if slug.endswith(suffix):
            slug = slug[: -len(suffix)]
    return slug


def instruction_aliases(slug: str, rules: AliasRules) -> Iterator[str]:
    """Slug-derived aliases for an instruction.

    "azure-verified-modules-avm-terraform" yields
    "azure-verified-modules-terraform" (abbreviation removed).
    """
    without_suffix = strip_suffixes(slug, rules.instruction_suffixes)
    if without_suffix != slug:
        yield without_suffix

    parts = slug.split("-")
    for abbrev in rules.abbreviations:
        if abbrev in parts:
            index = parts.index(abbrev)
            yield "-".join(p for i, p in enumerate(parts) if i != index)

    without_single_letters = "-".join(p for p in parts if len(p) > 1)
    if without_single_letters != slug:
        yield without_single_letters


def _is_domain_token(token: str, rules: AliasRules) -> bool:
    return (
        len(token) >= rules.min_domain_token_length
        and not token.startswith(rules.excluded_prefixes)
    )


def domain_aliases(tokens: list[str], rules: AliasRules) -> Iterator[str]:
    """Domain-style aliases for service-like tokens, e.g. "swarmia" -> "swarmia.com"."""
    for token in tokens:
        if _is_domain_token(token, rules):
            for suffix in rules.domain_suffixes:
                yield f"{token}{suffix}"


def mcp_aliases(record: CanonicalRecord, rules: AliasRules) -> Iterator[str]:
    """Slug- and name-derived aliases for an MCP server.

    Domain-style aliases count toward ``rules.max_domain_aliases`` when a
    cap is configured.
    """
    slug = record.slug.lower()
    budget = rules.max_domain_aliases

    def capped(candidates: Iterator[str]) -> Iterator[str]:
        nonlocal budget
        for candidate in candidates:
            if budget is not None:
                if budget <= 0:
                    return
                budget -= 1
            yield candidate

    yield from capped(domain_aliases(slug.split("-"), rules))

    for suffix in rules.domain_suffixes:
        if slug.endswith(suffix):
            yield slug[: -len(suffix)]
            break

    if record.name:
        name_slug = normalize_name(record.name)
        if name_slug != slug:
            yield name_slug

        name = record.name.lower()
        tokens = name.replace("/", "-").replace("_", "-").split("-")
        yield from capped(domain_aliases(tokens, rules))
