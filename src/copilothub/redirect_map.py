"""Static redirect map: generation, persistence and loading.

The map is produced offline from approved catalog records and consumed
read-only by the request normalizer, which never touches the database.

Shape on disk::

    {"instructions": {alias: slug}, "agents": {alias: slug},
     "mcps": {alias: slug}, "spec": slug-or-null}
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .aliases import instruction_aliases, mcp_aliases, title_alias
from .config import AliasRules, Config, get_config
from .core import CanonicalRecord, list_canonical_records

logger = logging.getLogger(__name__)

CATEGORIES = ("instructions", "agents", "mcps")


class RedirectMapError(RuntimeError):
    """The redirect map artifact is missing, unreadable or malformed."""


def _frozen(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RedirectMap:
    """Immutable alias -> canonical slug lookup tables."""
    instructions: Mapping[str, str] = field(default_factory=dict)
    agents: Mapping[str, str] = field(default_factory=dict)
    mcps: Mapping[str, str] = field(default_factory=dict)
    spec: Optional[str] = None

    def __post_init__(self):
        # Copy into read-only views so callers can't mutate shared state
        for category in CATEGORIES:
            object.__setattr__(self, category, _frozen(getattr(self, category)))

    def to_dict(self) -> dict:
        return {
            "instructions": dict(self.instructions),
            "agents": dict(self.agents),
            "mcps": dict(self.mcps),
            "spec": self.spec,
        }

    def to_json(self) -> str:
        """Serialize deterministically (sorted keys) so regeneration is byte-stable."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n"

    @classmethod
    def from_dict(cls, data: object) -> "RedirectMap":
        """Validate and build a map from decoded JSON.

        Raises:
            RedirectMapError: If the data does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise RedirectMapError("Redirect map must be a JSON object")

        tables = {}
        for category in CATEGORIES:
            table = data.get(category)
            if not isinstance(table, dict):
                raise RedirectMapError(f"Redirect map field '{category}' must be an object")
            for key, value in table.items():
                if not isinstance(value, str) or not value:
                    raise RedirectMapError(
                        f"Redirect map entry {category}[{key!r}] must be a non-empty string"
                    )
            tables[category] = table

        spec = data.get("spec")
        if spec is not None and not (isinstance(spec, str) and spec):
            raise RedirectMapError("Redirect map field 'spec' must be a string or null")

        return cls(spec=spec, **tables)

    def stats(self) -> dict[str, int]:
        """Number of entries per category."""
        return {category: len(getattr(self, category)) for category in CATEGORIES}


# --- Generation ---


def _add_alias(table: dict[str, str], key: Optional[str], slug: str) -> None:
    """Register an alias unless the key already belongs to another record."""
    if key:
        table.setdefault(key, slug)


def _usable(records: Iterable[CanonicalRecord]) -> list[CanonicalRecord]:
    usable = []
    for record in records:
        if not record.slug or not record.slug.strip():
            logger.warning(
                "Skipping %s record with empty slug (title: %r)", record.kind, record.title
            )
            continue
        usable.append(record)
    return usable


def _seed_identities(records: list[CanonicalRecord]) -> dict[str, str]:
    table: dict[str, str] = {}
    for record in records:
        table[record.slug.lower()] = record.slug
    return table


def _build_instructions(records: list[CanonicalRecord], rules: AliasRules) -> dict[str, str]:
    table = _seed_identities(records)
    for record in records:
        _add_alias(table, title_alias(record.title), record.slug)
        for alias in instruction_aliases(record.slug.lower(), rules):
            _add_alias(table, alias, record.slug)
    return table


def _build_agents(records: list[CanonicalRecord]) -> dict[str, str]:
    table = _seed_identities(records)
    for record in records:
        _add_alias(table, title_alias(record.title), record.slug)
    return table


def _build_mcps(records: list[CanonicalRecord], rules: AliasRules) -> dict[str, str]:
    table = _seed_identities(records)
    for record in records:
        for alias in mcp_aliases(record, rules):
            _add_alias(table, alias, record.slug)
    return table


def find_spec_agent(records: Iterable[CanonicalRecord], token: str = "specification") -> Optional[str]:
    """Pick the agent designated as the specification document.

    An agent whose slug is exactly the token wins; otherwise the first
    agent whose slug or title contains it.
    """
    token = token.lower()
    candidates = [
        r for r in records
        if token in r.slug.lower() or token in (r.title or "").lower()
    ]
    for record in candidates:
        if record.slug.lower() == token:
            return record.slug
    return candidates[0].slug if candidates else None


def build_redirect_map(
    instructions: Iterable[CanonicalRecord] = (),
    agents: Iterable[CanonicalRecord] = (),
    mcps: Iterable[CanonicalRecord] = (),
    rules: Optional[AliasRules] = None,
) -> RedirectMap:
    """Build a redirect map from approved records.

    Records are processed in the order given; when two records derive the
    same alias, the first one keeps it. Every record's own slug always
    resolves to itself.

    Args:
        instructions: Approved instruction records.
        agents: Approved agent records.
        mcps: Approved MCP server records.
        rules: Alias heuristics. Defaults to the built-in tables.

    Returns:
        The immutable redirect map.
    """
    if rules is None:
        rules = AliasRules()

    instruction_records = _usable(instructions)
    agent_records = _usable(agents)
    mcp_records = _usable(mcps)

    return RedirectMap(
        instructions=_build_instructions(instruction_records, rules),
        agents=_build_agents(agent_records),
        mcps=_build_mcps(mcp_records, rules),
        spec=find_spec_agent(agent_records, rules.spec_token),
    )


def generate_redirect_map(config: Optional[Config] = None) -> RedirectMap:
    """Build the redirect map from the approved records in the database.

    All records are fetched before anything is built; a database error
    propagates to the caller.
    """
    if config is None:
        config = get_config()

    instructions = list_canonical_records("instruction", config)
    agents = list_canonical_records("agent", config)
    mcps = list_canonical_records("mcp", config)

    logger.info(
        "Building redirect map from %d instructions, %d agents, %d MCP servers",
        len(instructions), len(agents), len(mcps),
    )

    redirect_map = build_redirect_map(instructions, agents, mcps, rules=config.aliases)

    if redirect_map.spec:
        logger.info("Specification agent: %s", redirect_map.spec)
    else:
        logger.info("No specification agent found")

    return redirect_map


# --- Persistence ---


def write_redirect_map(redirect_map: RedirectMap, path: Path) -> None:
    """Write the map as JSON, replacing any existing file atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(redirect_map.to_json(), encoding="utf-8")
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def load_redirect_map(path: Path) -> RedirectMap:
    """Load and validate a redirect map artifact.

    Raises:
        RedirectMapError: If the file is missing, is not valid JSON, or has
            the wrong shape.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise RedirectMapError(
            f"Redirect map not found: {path} (run 'copilothub redirects generate')"
        ) from None
    except OSError as e:
        raise RedirectMapError(f"Cannot read redirect map {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RedirectMapError(f"Invalid JSON in redirect map {path}: {e}") from e

    redirect_map = RedirectMap.from_dict(data)
    logger.info("Loaded redirect map from %s: %s", path, redirect_map.stats())
    return redirect_map


def regenerate(config: Optional[Config] = None, output: Optional[Path] = None) -> RedirectMap:
    """Generate the map from the database and write it out.

    Nothing is written unless generation succeeds, so the previous artifact
    stays in place on failure.
    """
    if config is None:
        config = get_config()
    if output is None:
        output = config.redirect_map_path

    redirect_map = generate_redirect_map(config)
    write_redirect_map(redirect_map, output)
    logger.info("Wrote redirect map to %s", output)
    return redirect_map
