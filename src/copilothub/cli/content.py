"""Content CLI commands for adding and moderating catalog items."""

from __future__ import annotations

import json
import sqlite3
import sys
from typing import Optional

import click

from .. import core
from ..schema import CONTENT_STATUSES

KIND_CHOICE = click.Choice(sorted(core.CONTENT_KINDS))


@click.group()
def content():
    """Add, approve and list catalog items."""
    pass


@content.command("add")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("title")
@click.option("--slug", "-s", help="Explicit slug (default: generated from title)")
@click.option("--name", "-n", help="Freeform identifier, e.g. owner/repo (MCP servers only)")
@click.option("--description", "-d", help="Short description")
@click.option("--content-file", type=click.File("r"), help="Read the body from a file")
@click.option("--approve", is_flag=True, help="Approve immediately")
def add(
    kind: str,
    title: str,
    slug: Optional[str],
    name: Optional[str],
    description: Optional[str],
    content_file,
    approve: bool,
):
    """Add a catalog item."""
    body = content_file.read() if content_file else None
    try:
        stored_slug = core.add_content(
            kind,
            title,
            slug=slug,
            description=description,
            content=body,
            name=name,
            status=core.APPROVED if approve else core.PENDING,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except sqlite3.IntegrityError:
        click.echo(f"Error: a {kind} with slug '{slug}' already exists", err=True)
        sys.exit(1)

    click.echo(f"Added {kind}: {stored_slug}")


@content.command("approve")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("slug")
def approve(kind: str, slug: str):
    """Approve a pending item."""
    if core.approve_content(kind, slug):
        click.echo(f"Approved {kind}: {slug}")
    else:
        click.echo(f"{kind.capitalize()} not found: {slug}", err=True)
        sys.exit(1)


@content.command("reject")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("slug")
def reject(kind: str, slug: str):
    """Reject an item (kept, but hidden and excluded from redirects)."""
    if core.set_status(kind, slug, core.REJECTED):
        click.echo(f"Rejected {kind}: {slug}")
    else:
        click.echo(f"{kind.capitalize()} not found: {slug}", err=True)
        sys.exit(1)


@content.command("list")
@click.argument("kind", type=KIND_CHOICE)
@click.option("--status", type=click.Choice(CONTENT_STATUSES), help="Filter by status")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def list_items(kind: str, status: Optional[str], json_output: bool):
    """List catalog items of one kind."""
    items = core.list_content(kind, status=status)

    if json_output:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2, default=str))
        return

    if not items:
        click.echo("No items found.")
        return

    for item in items:
        line = f"[{item.status}] {item.slug}  {item.title}"
        if item.name:
            line += f"  ({item.name})"
        click.echo(line)
