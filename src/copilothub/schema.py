"""Database schema definitions for copilothub."""

SCHEMA_VERSION = 1

CONTENT_STATUSES = ("pending", "approved", "rejected")

# Content tables share one shape; mcp_servers adds a freeform `name`
# (often "owner/repo").
_CONTENT_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id TEXT PRIMARY KEY,
    slug TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    description TEXT,
    content TEXT,{extra_columns}
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'approved', 'rejected')),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_{table}_status ON {table}(status);
CREATE INDEX IF NOT EXISTS idx_{table}_created ON {table}(created_at);
"""

SCHEMA_SQL = (
    """
-- Metadata table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""
    + _CONTENT_TABLE_SQL.format(table="instructions", extra_columns="")
    + _CONTENT_TABLE_SQL.format(table="agents", extra_columns="")
    + _CONTENT_TABLE_SQL.format(
        table="mcp_servers", extra_columns="\n    name TEXT,"
    )
)
