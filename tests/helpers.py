"""Test helper utilities.

This module provides helper functions for writing tests, including:
- Factory helpers for canonical records
- Assertion helpers for redirect map invariants
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from copilothub.core import CanonicalRecord

if TYPE_CHECKING:
    from copilothub.redirect_map import RedirectMap


# -----------------------------------------------------------------------------
# Factory Helpers
# -----------------------------------------------------------------------------


def instruction(slug: str, title: str) -> CanonicalRecord:
    return CanonicalRecord(kind="instruction", slug=slug, title=title)


def agent(slug: str, title: str) -> CanonicalRecord:
    return CanonicalRecord(kind="agent", slug=slug, title=title)


def mcp(slug: str, title: str, name: Optional[str] = None) -> CanonicalRecord:
    return CanonicalRecord(kind="mcp", slug=slug, title=title, name=name)


# -----------------------------------------------------------------------------
# Assertion Helpers
# -----------------------------------------------------------------------------


def assert_no_dangling_targets(
    redirect_map: RedirectMap,
    instructions: Iterable[CanonicalRecord] = (),
    agents: Iterable[CanonicalRecord] = (),
    mcps: Iterable[CanonicalRecord] = (),
) -> None:
    """Assert every mapped value is the slug of a record of the matching kind.

    Also checks that keys are lowercase and that every record's slug
    resolves to itself.

    Raises:
        AssertionError: If any invariant is violated
    """
    for category, records in (
        ("instructions", instructions),
        ("agents", agents),
        ("mcps", mcps),
    ):
        table = getattr(redirect_map, category)
        slugs = {r.slug for r in records if r.slug}

        dangling = {k: v for k, v in table.items() if v not in slugs}
        assert not dangling, f"{category}: dangling targets {dangling}"

        upper = [k for k in table if k != k.lower()]
        assert not upper, f"{category}: non-lowercase keys {upper}"

        for slug in slugs:
            assert table.get(slug.lower()) == slug, f"{category}: {slug} does not resolve to itself"

    if redirect_map.spec is not None:
        assert redirect_map.spec in {r.slug for r in agents}, "spec is not an agent slug"
