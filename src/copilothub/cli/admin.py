"""Admin CLI commands for database and system management."""

from __future__ import annotations

import click

from ..config import active_config_path, get_config
from ..db import get_schema_version, init_db


@click.group()
def admin():
    """Database and system management commands."""
    pass


@admin.command()
@click.option("--force", is_flag=True, help="Drop all catalog content and start fresh")
def init(force: bool):
    """Initialize the database and configuration."""
    config = get_config()
    config_path = active_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    if force:
        click.confirm("This deletes every catalog item. Continue?", abort=True)

    init_db(config, force=force)

    # Save default config if it doesn't exist
    if not config_path.exists():
        config.save(config_path)

    click.echo(f"Initialized copilothub at {config_path.parent}")
    click.echo(f"  Database: {config.db_path}")
    click.echo(f"  Redirect map: {config.redirect_map_path}")
    click.echo(f"  Config: {config_path}")


@admin.command()
def status():
    """Show database and redirect map locations."""
    config = get_config()
    version = get_schema_version(config)

    click.echo(f"Database: {config.db_path}")
    if version is None:
        click.echo("  not initialized (run 'copilothub admin init')")
    else:
        click.echo(f"  schema version: {version}")

    click.echo(f"Redirect map: {config.redirect_map_path}")
    if not config.redirect_map_path.exists():
        click.echo("  not generated (run 'copilothub redirects generate')")
