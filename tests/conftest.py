"""Centralized pytest fixtures and configuration.

This module provides shared fixtures for all tests, including:
- Database configuration with isolated temp directories
- A pre-populated catalog for generator, web and CLI tests
- A redirect map built from hand-written records for normalizer tests
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from copilothub.config import Config
from copilothub.db import init_db

if TYPE_CHECKING:
    from collections.abc import Generator


# -----------------------------------------------------------------------------
# Database Configuration Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config(temp_dir: Path) -> Generator[Config, None, None]:
    """Create a temporary configuration with an initialized, empty database."""
    config = Config(
        db_path=temp_dir / "test.db",
        redirect_map_path=temp_dir / "redirect-map.json",
    )
    init_db(config)
    yield config


@pytest.fixture
def global_config(temp_config: Config, monkeypatch) -> Config:
    """Install temp_config as the process-wide config used by the CLI."""
    monkeypatch.setattr("copilothub.config._config", temp_config)
    return temp_config


# -----------------------------------------------------------------------------
# Pre-populated Database Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def sample_catalog(temp_config: Config) -> dict[str, list[str]]:
    """Create a small catalog and return the stored slugs per kind.

    Approved items are eligible for the redirect map; the pending
    instruction must never show up in it.
    """
    from copilothub import core

    catalog = {
        "instruction": [
            core.add_content(
                "instruction",
                "Terraform Azure Verified Modules",
                slug="azure-verified-modules-terraform",
                status="approved",
                config=temp_config,
            ),
            core.add_content(
                "instruction",
                "Python Best Practices",
                slug="python-best-practices",
                description="Style and packaging guidance for Python projects.",
                status="approved",
                config=temp_config,
            ),
            core.add_content(
                "instruction",
                "Draft Rules",
                slug="draft-instructions",
                config=temp_config,
            ),
        ],
        "agent": [
            core.add_content(
                "agent",
                "Code Reviewer",
                slug="code-reviewer",
                status="approved",
                config=temp_config,
            ),
            core.add_content(
                "agent",
                "Specification Writer",
                slug="spec-writer",
                status="approved",
                config=temp_config,
            ),
        ],
        "mcp": [
            core.add_content(
                "mcp",
                "Swarmia",
                slug="mattjegan-swarmia-mcp",
                name="mattjegan/swarmia-mcp",
                status="approved",
                config=temp_config,
            ),
        ],
    }
    return catalog
