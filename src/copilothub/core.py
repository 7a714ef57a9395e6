"""Core API for the copilothub content store."""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ulid import ULID

from .config import Config, get_config
from .db import get_db, init_db
from .schema import CONTENT_STATUSES
from .slugs import generate_unique_slug


@dataclass(frozen=True)
class KindInfo:
    """Storage and routing details for one content kind."""
    name: str
    table: str
    url_prefix: str


CONTENT_KINDS = {
    "instruction": KindInfo("instruction", "instructions", "/instructions"),
    "agent": KindInfo("agent", "agents", "/agents"),
    "mcp": KindInfo("mcp", "mcp_servers", "/mcps"),
}

APPROVED = "approved"
PENDING = "pending"
REJECTED = "rejected"

_DOMAIN_SUFFIX_RE = re.compile(r"\.(com|org|net|io|dev)$", re.IGNORECASE)


@dataclass(frozen=True)
class CanonicalRecord:
    """The fields of an approved item that redirect aliases are derived from."""
    kind: str
    slug: str
    title: str
    name: Optional[str] = None


@dataclass
class ContentItem:
    """A catalog item (instruction, agent or MCP server) with its metadata."""
    id: str
    kind: str
    slug: str
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    name: Optional[str] = None  # MCP servers only
    status: str = PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def url(self) -> str:
        return f"{CONTENT_KINDS[self.kind].url_prefix}/{self.slug}"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "kind": self.kind,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "status": self.status,
            "url": self.url,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.kind == "mcp":
            data["name"] = self.name
        return data


def kind_info(kind: str) -> KindInfo:
    """Look up a content kind, raising ValueError for unknown kinds."""
    try:
        return CONTENT_KINDS[kind]
    except KeyError:
        raise ValueError(
            f"Invalid content kind: {kind} (expected one of {', '.join(CONTENT_KINDS)})"
        ) from None


def ensure_initialized(config: Optional[Config] = None) -> None:
    """Ensure the database is initialized."""
    if config is None:
        config = get_config()
    init_db(config)


def _generate_id() -> str:
    """Generate a new ULID for a content item."""
    return str(ULID())


def _validate_status(status: str) -> None:
    if status not in CONTENT_STATUSES:
        raise ValueError(
            f"Invalid status: {status} (expected one of {', '.join(CONTENT_STATUSES)})"
        )


def _row_to_item(kind: str, row) -> ContentItem:
    return ContentItem(
        id=row["id"],
        kind=kind,
        slug=row["slug"],
        title=row["title"],
        description=row["description"],
        content=row["content"],
        name=row["name"] if kind == "mcp" else None,
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# --- CRUD Operations ---


def add_content(
    kind: str,
    title: str,
    slug: Optional[str] = None,
    description: Optional[str] = None,
    content: Optional[str] = None,
    name: Optional[str] = None,
    status: str = PENDING,
    config: Optional[Config] = None,
) -> str:
    """Add a catalog item.

    Args:
        kind: One of "instruction", "agent", "mcp".
        title: Display title. Used to generate the slug when none is given.
        slug: Explicit slug. Must be unique within the kind.
        description: Optional short description.
        content: Optional body (markdown).
        name: Freeform identifier such as "owner/repo" (MCP servers only).
        status: Moderation status, "pending" by default.
        config: Configuration to use.

    Returns:
        The slug the item was stored under.
    """
    info = kind_info(kind)
    _validate_status(status)

    if not title or not title.strip():
        raise ValueError("Title is required")
    if name is not None and kind != "mcp":
        raise ValueError("Only MCP servers have a name")

    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        if slug is None:
            cursor = conn.execute(f"SELECT slug FROM {info.table}")
            slug = generate_unique_slug(title, [row["slug"] for row in cursor.fetchall()])
        if not slug:
            raise ValueError(f"Cannot derive a slug from title: {title!r}")

        columns = ["id", "slug", "title", "description", "content", "status"]
        values = [_generate_id(), slug, title, description, content, status]
        if kind == "mcp":
            columns.append("name")
            values.append(name)

        conn.execute(
            f"INSERT INTO {info.table} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})",
            values,
        )
        conn.commit()

    return slug


def get_content(
    kind: str,
    slug: str,
    approved_only: bool = False,
    config: Optional[Config] = None,
) -> Optional[ContentItem]:
    """Get a catalog item by its exact slug.

    Returns:
        The item if found, None otherwise.
    """
    info = kind_info(kind)
    if config is None:
        config = get_config()

    ensure_initialized(config)

    query = f"SELECT * FROM {info.table} WHERE slug = ?"
    params: list = [slug]
    if approved_only:
        query += " AND status = ?"
        params.append(APPROVED)

    with get_db(config) as conn:
        row = conn.execute(query, params).fetchone()
        if row is None:
            return None
        return _row_to_item(kind, row)


def list_content(
    kind: str,
    status: Optional[str] = None,
    config: Optional[Config] = None,
) -> list[ContentItem]:
    """List catalog items of a kind, newest first, optionally filtered by status."""
    info = kind_info(kind)
    if status is not None:
        _validate_status(status)
    if config is None:
        config = get_config()

    ensure_initialized(config)

    query = f"SELECT * FROM {info.table}"
    params: list = []
    if status is not None:
        query += " WHERE status = ?"
        params.append(status)
    query += " ORDER BY created_at DESC, rowid DESC"

    with get_db(config) as conn:
        cursor = conn.execute(query, params)
        return [_row_to_item(kind, row) for row in cursor.fetchall()]


def set_status(
    kind: str,
    slug: str,
    status: str,
    config: Optional[Config] = None,
) -> bool:
    """Set the moderation status of an item.

    Returns:
        True if updated, False if not found.
    """
    info = kind_info(kind)
    _validate_status(status)
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute(
            f"""
            UPDATE {info.table}
            SET status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE slug = ?
            """,
            (status, slug),
        )
        conn.commit()
        return cursor.rowcount > 0


def approve_content(kind: str, slug: str, config: Optional[Config] = None) -> bool:
    """Approve an item, making it visible and eligible for the redirect map."""
    return set_status(kind, slug, APPROVED, config=config)


def delete_content(kind: str, slug: str, config: Optional[Config] = None) -> bool:
    """Delete an item.

    Returns:
        True if deleted, False if not found.
    """
    info = kind_info(kind)
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute(f"DELETE FROM {info.table} WHERE slug = ?", (slug,))
        conn.commit()
        return cursor.rowcount > 0


def list_canonical_records(
    kind: str,
    config: Optional[Config] = None,
) -> list[CanonicalRecord]:
    """Fetch the approved records of a kind for redirect map generation.

    Records are ordered by slug so alias assignment is reproducible
    between runs.
    """
    info = kind_info(kind)
    if config is None:
        config = get_config()

    # Connecting would create an empty database file
    if not config.db_path.exists():
        raise sqlite3.OperationalError(f"Database not found: {config.db_path}")

    columns = "slug, title, name" if kind == "mcp" else "slug, title"

    with get_db(config) as conn:
        cursor = conn.execute(
            f"SELECT {columns} FROM {info.table} WHERE status = ? ORDER BY slug ASC",
            (APPROVED,),
        )
        return [
            CanonicalRecord(
                kind=kind,
                slug=row["slug"],
                title=row["title"],
                name=row["name"] if kind == "mcp" else None,
            )
            for row in cursor.fetchall()
        ]


# --- Fuzzy lookups ---


def _contains(value: str) -> str:
    """Build a LIKE pattern matching `value` as a literal substring."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def find_by_slug(
    kind: str,
    slug: str,
    config: Optional[Config] = None,
) -> Optional[str]:
    """Find the canonical slug for an approved item by exact or fuzzy match.

    Tries an exact slug match first, then a case-insensitive substring match
    against slug and title (plus name and de-domained variants for MCP
    servers), preferring the newest item.

    Returns:
        The matching item's slug, or None.
    """
    info = kind_info(kind)
    if config is None:
        config = get_config()

    ensure_initialized(config)

    lowered = slug.lower()

    with get_db(config) as conn:
        row = conn.execute(
            f"SELECT slug FROM {info.table} WHERE slug = ? AND status = ?",
            (lowered, APPROVED),
        ).fetchone()
        if row is not None:
            return row["slug"]

        clauses = ["slug LIKE ? ESCAPE '\\'", "title LIKE ? ESCAPE '\\'"]
        params = [_contains(lowered), _contains(slug)]

        if kind == "mcp":
            # "swarmia.com" should find "mattjegan-swarmia-mcp"
            domain_name = _DOMAIN_SUFFIX_RE.sub("", slug).lower()
            clauses += [
                "name LIKE ? ESCAPE '\\'",
                "slug LIKE ? ESCAPE '\\'",
                "slug LIKE ? ESCAPE '\\'",
            ]
            params += [_contains(slug), _contains(domain_name), _contains(lowered.replace(".", "-"))]

        row = conn.execute(
            f"""
            SELECT slug FROM {info.table}
            WHERE status = ? AND ({' OR '.join(clauses)})
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """,
            [APPROVED, *params],
        ).fetchone()

    return row["slug"] if row is not None else None


def find_specification_agent(config: Optional[Config] = None) -> Optional[str]:
    """Find the agent that serves as the specification document.

    Prefers an agent whose slug is exactly "specification", then any agent
    with "specification" in its slug or title, or a slug of exactly "spec".
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        row = conn.execute(
            "SELECT slug FROM agents WHERE slug = 'specification' AND status = ?",
            (APPROVED,),
        ).fetchone()
        if row is not None:
            return row["slug"]

        row = conn.execute(
            """
            SELECT slug FROM agents
            WHERE status = ?
              AND (slug LIKE '%specification%'
                   OR title LIKE '%specification%'
                   OR lower(slug) = 'spec')
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """,
            (APPROVED,),
        ).fetchone()

    return row["slug"] if row is not None else None
