"""Command-line interface for copilothub."""

from __future__ import annotations

import logging
import sys

import click

from .admin import admin
from .content import content
from .redirects import redirects


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Show informational log messages")
def main(verbose: bool):
    """CopilotHub - catalog of AI prompts, agents and MCP servers.

    Commands are organized into three groups, plus the web server:

    \b
      admin      Database and system management
      content    Add, approve and list catalog items
      redirects  Generate and inspect the redirect map
      serve      Run the web application
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, help="Bind port")
def serve(host: str, port: int):
    """Run the web application (requires a generated redirect map)."""
    import uvicorn

    from ..redirect_map import RedirectMapError
    from ..web import create_app

    try:
        app = create_app()
    except RedirectMapError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    uvicorn.run(app, host=host, port=port)


# Register command groups
main.add_command(admin)
main.add_command(content)
main.add_command(redirects)


if __name__ == "__main__":
    main()
