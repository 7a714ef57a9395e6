"""Per-request URL normalization against the static redirect map.

The normalizer only does dictionary lookups on an injected, immutable
``RedirectMap``; it performs no I/O and is safe to share between requests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

from .redirect_map import RedirectMap

LEGACY_INSTRUCTION_RE = re.compile(r"^/instructions/(.+)\.instructions\.md$")
CLEAN_SLUG_RE = re.compile(r"^[a-z0-9-]+$")


@dataclass(frozen=True)
class PassThrough:
    """Leave the request alone."""

    @property
    def is_redirect(self) -> bool:
        return False


@dataclass(frozen=True)
class Redirect:
    """Redirect the request to ``location`` (path plus query string)."""
    location: str
    status_code: int = 301

    @property
    def is_redirect(self) -> bool:
        return True


PASS_THROUGH = PassThrough()

Decision = Union[PassThrough, Redirect]


class RequestNormalizer:
    """Decide whether an inbound path should be redirected.

    Rules are checked in a fixed order and the first match wins:

    1. trailing slash removal (every path except ``/``)
    2. legacy ``/instructions/<slug>.instructions.md`` URLs
    3. the ``/spec`` shortcut
    4. repair of malformed ``/mcps/<slug>`` slugs
    5. repair of ``/instructions/<slug>`` aliases
    """

    def __init__(self, redirect_map: RedirectMap):
        self.redirect_map = redirect_map

    def normalize(self, path: str, query: str = "") -> Decision:
        """Return the decision for a request path and its raw query string."""
        if query.startswith("?"):
            query = query[1:]

        for rule in (
            self._trailing_slash,
            self._legacy_instruction,
            self._spec_shortcut,
            self._mcp_repair,
            self._instruction_repair,
        ):
            location = rule(path)
            if location is not None:
                return Redirect(_with_query(location, query))
        return PASS_THROUGH

    def _trailing_slash(self, path: str) -> Optional[str]:
        if path != "/" and path.endswith("/"):
            return path[:-1]
        return None

    def _legacy_instruction(self, path: str) -> Optional[str]:
        match = LEGACY_INSTRUCTION_RE.match(path)
        if match is None:
            return None
        canonical = self.redirect_map.instructions.get(match.group(1).lower())
        if canonical is None:
            return "/instructions"
        return f"/instructions/{canonical}"

    def _spec_shortcut(self, path: str) -> Optional[str]:
        # "/spec/" is normally caught by the trailing slash rule first
        if path not in ("/spec", "/spec/"):
            return None
        if self.redirect_map.spec:
            return f"/agents/{self.redirect_map.spec}"
        return "/agents"

    def _mcp_repair(self, path: str) -> Optional[str]:
        slug = _remainder(path, "/mcps/")
        if not slug:
            return None
        # Only slugs that can't be canonical are worth repairing
        if "." not in slug and CLEAN_SLUG_RE.match(slug):
            return None
        canonical = self.redirect_map.mcps.get(slug.lower())
        if canonical is None or canonical == slug:
            return None
        return f"/mcps/{canonical}"

    def _instruction_repair(self, path: str) -> Optional[str]:
        slug = _remainder(path, "/instructions/")
        if not slug:
            return None
        canonical = self.redirect_map.instructions.get(slug.lower())
        if canonical is None or canonical == slug:
            return None
        return f"/instructions/{canonical}"


def _remainder(path: str, prefix: str) -> Optional[str]:
    if not path.startswith(prefix):
        return None
    return path[len(prefix):]


def _with_query(location: str, query: str) -> str:
    return f"{location}?{query}" if query else location
