"""Redirect CLI commands: generate the static map and inspect decisions."""

from __future__ import annotations

import json
import sqlite3
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import click

from .. import core
from ..config import get_config
from ..normalizer import RequestNormalizer
from ..redirect_map import RedirectMapError, load_redirect_map, regenerate

# Legacy URLs that were reported broken; `redirects check` runs these by default.
KNOWN_LEGACY_INPUTS = [
    ("instruction", "terraform"),
    ("instruction", "azure-verified-modules-terraform"),
    ("instruction", "powershell"),
    ("spec", "spec"),
    ("mcp", "swarmia.com"),
]

FALLBACKS = {
    "instruction": "/instructions",
    "agent": "/agents",
    "spec": "/agents",
    "mcp": "404",
}


@click.group()
def redirects():
    """Generate and inspect the redirect map."""
    pass


@redirects.command()
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the map (default: redirect_map_path from config)",
)
def generate(output: Optional[Path]):
    """Generate the redirect map from approved content.

    The previous map is left untouched if anything fails.
    """
    config = get_config()
    output = output or config.redirect_map_path

    try:
        redirect_map = regenerate(config, output)
    except (sqlite3.Error, OSError) as e:
        click.echo(f"Error: redirect map generation failed: {e}", err=True)
        click.echo(f"  {output} was not modified.", err=True)
        sys.exit(1)

    stats = redirect_map.stats()
    click.echo("Redirect map generated.")
    click.echo(f"  Instructions: {stats['instructions']} mappings")
    click.echo(f"  Agents: {stats['agents']} mappings")
    click.echo(f"  MCPs: {stats['mcps']} mappings")
    click.echo(f"  Spec redirect: {redirect_map.spec or 'none'}")
    click.echo(f"  Output: {output}")


@redirects.command()
@click.argument("url")
@click.option(
    "--map", "map_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Redirect map to use (default: redirect_map_path from config)",
)
def resolve(url: str, map_path: Optional[Path]):
    """Show what the web app does with a request path.

    \b
    Examples:
      copilothub redirects resolve /instructions/terraform.instructions.md
      copilothub redirects resolve '/tools/?page=2'
    """
    map_path = map_path or get_config().redirect_map_path
    try:
        redirect_map = load_redirect_map(map_path)
    except RedirectMapError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    parts = urlsplit(url)
    decision = RequestNormalizer(redirect_map).normalize(parts.path or "/", parts.query)

    if decision.is_redirect:
        click.echo(f"{decision.status_code} {url} → {decision.location}")
    else:
        click.echo(f"pass {url}")


@redirects.command()
@click.option("--instruction", "instructions", multiple=True, help="Instruction slug to look up")
@click.option("--agent", "agents", multiple=True, help="Agent slug to look up")
@click.option("--mcp", "mcps", multiple=True, help="MCP slug to look up")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def check(instructions, agents, mcps, json_output: bool):
    """Check legacy inputs against the database with fuzzy matching.

    Without options, checks the known legacy URLs. Inputs that don't match
    anything fall back to a listing page (or 404 for MCP servers), so a miss
    is reported but is not an error.
    """
    cases = (
        [("instruction", s) for s in instructions]
        + [("agent", s) for s in agents]
        + [("mcp", s) for s in mcps]
    ) or KNOWN_LEGACY_INPUTS

    results = []
    for kind, value in cases:
        if kind == "spec":
            found = core.find_specification_agent()
        else:
            found = core.find_by_slug(kind, value)
        results.append({
            "kind": kind,
            "input": value,
            "found": found,
            "fallback": None if found else FALLBACKS[kind],
        })

    if json_output:
        click.echo(json.dumps(results, indent=2))
        return

    for result in results:
        if result["found"]:
            click.echo(f"found    {result['kind']} {result['input']!r} → {result['found']}")
        else:
            click.secho(
                f"missing  {result['kind']} {result['input']!r} (falls back to {result['fallback']})",
                fg="yellow",
            )

    found_count = sum(1 for r in results if r["found"])
    click.echo(f"\n{found_count}/{len(results)} inputs resolved")
