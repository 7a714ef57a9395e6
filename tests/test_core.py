"""Tests for the copilothub content store."""

import sqlite3

import pytest

from copilothub import core
from copilothub.config import Config


class TestCRUD:
    """Test CRUD operations."""

    def test_add_content(self, temp_config):
        """Test adding an item with an explicit slug."""
        slug = core.add_content(
            "instruction",
            "Terraform Conventions",
            slug="terraform-conventions",
            description="How we write Terraform.",
            config=temp_config,
        )

        assert slug == "terraform-conventions"

    def test_slug_generated_from_title(self, temp_config):
        slug = core.add_content("agent", "Code Reviewer!", config=temp_config)
        assert slug == "code-reviewer"

    def test_generated_slug_is_unique(self, temp_config):
        first = core.add_content("agent", "Code Reviewer", config=temp_config)
        second = core.add_content("agent", "Code Reviewer", config=temp_config)

        assert first == "code-reviewer"
        assert second != first
        assert second.startswith("code-reviewer-")
        assert len(second) == len("code-reviewer-") + 4

    def test_same_slug_allowed_across_kinds(self, temp_config):
        core.add_content("agent", "Terraform", config=temp_config)
        core.add_content("instruction", "Terraform", config=temp_config)

        assert core.get_content("agent", "terraform", config=temp_config) is not None
        assert core.get_content("instruction", "terraform", config=temp_config) is not None

    def test_duplicate_explicit_slug_rejected(self, temp_config):
        core.add_content("mcp", "Swarmia", slug="swarmia", config=temp_config)
        with pytest.raises(sqlite3.IntegrityError):
            core.add_content("mcp", "Swarmia Again", slug="swarmia", config=temp_config)

    def test_get_content(self, temp_config):
        core.add_content(
            "mcp",
            "Swarmia",
            slug="mattjegan-swarmia-mcp",
            name="mattjegan/swarmia-mcp",
            content="# Swarmia MCP",
            config=temp_config,
        )

        item = core.get_content("mcp", "mattjegan-swarmia-mcp", config=temp_config)

        assert item is not None
        assert item.kind == "mcp"
        assert item.title == "Swarmia"
        assert item.name == "mattjegan/swarmia-mcp"
        assert item.content == "# Swarmia MCP"
        assert item.status == "pending"
        assert item.url == "/mcps/mattjegan-swarmia-mcp"
        assert len(item.id) == 26  # ULID

    def test_get_nonexistent_content(self, temp_config):
        assert core.get_content("agent", "nope", config=temp_config) is None

    def test_approved_only(self, temp_config):
        core.add_content("agent", "Draft Agent", slug="draft", config=temp_config)

        assert core.get_content("agent", "draft", approved_only=True, config=temp_config) is None
        core.approve_content("agent", "draft", config=temp_config)
        assert core.get_content("agent", "draft", approved_only=True, config=temp_config) is not None

    def test_set_status(self, temp_config):
        core.add_content("instruction", "Go Style", slug="go-style", config=temp_config)

        assert core.set_status("instruction", "go-style", "rejected", config=temp_config)
        assert core.get_content("instruction", "go-style", config=temp_config).status == "rejected"

    def test_set_status_missing(self, temp_config):
        assert not core.approve_content("instruction", "missing", config=temp_config)

    def test_delete_content(self, temp_config):
        core.add_content("instruction", "Go Style", slug="go-style", config=temp_config)

        assert core.delete_content("instruction", "go-style", config=temp_config)
        assert not core.delete_content("instruction", "go-style", config=temp_config)
        assert core.get_content("instruction", "go-style", config=temp_config) is None

    def test_list_content_by_status(self, sample_catalog, temp_config):
        approved = core.list_content("instruction", status="approved", config=temp_config)
        pending = core.list_content("instruction", status="pending", config=temp_config)

        assert {i.slug for i in approved} == {"azure-verified-modules-terraform", "python-best-practices"}
        assert [i.slug for i in pending] == ["draft-instructions"]
        assert len(core.list_content("instruction", config=temp_config)) == 3


class TestValidation:
    """Test input validation."""

    def test_unknown_kind(self, temp_config):
        with pytest.raises(ValueError, match="Invalid content kind"):
            core.add_content("prompt", "Hello", config=temp_config)

    def test_empty_title(self, temp_config):
        with pytest.raises(ValueError, match="Title is required"):
            core.add_content("agent", "  ", config=temp_config)

    def test_untitled_slug(self, temp_config):
        with pytest.raises(ValueError, match="Cannot derive a slug"):
            core.add_content("agent", "!!!", config=temp_config)

    def test_name_only_for_mcp(self, temp_config):
        with pytest.raises(ValueError, match="Only MCP servers"):
            core.add_content("agent", "Helper", name="owner/helper", config=temp_config)

    def test_invalid_status(self, temp_config):
        with pytest.raises(ValueError, match="Invalid status"):
            core.add_content("agent", "Helper", status="published", config=temp_config)


class TestCanonicalRecords:
    """Test fetching records for redirect map generation."""

    def test_only_approved_sorted_by_slug(self, temp_config):
        for slug in ("zeta", "alpha", "mid"):
            core.add_content("agent", slug.title(), slug=slug, status="approved", config=temp_config)
        core.add_content("agent", "Hidden", slug="beta", config=temp_config)

        records = core.list_canonical_records("agent", temp_config)

        assert [r.slug for r in records] == ["alpha", "mid", "zeta"]
        assert all(r.kind == "agent" and r.name is None for r in records)

    def test_mcp_records_carry_name(self, sample_catalog, temp_config):
        records = core.list_canonical_records("mcp", temp_config)

        assert records == [
            core.CanonicalRecord(
                kind="mcp",
                slug="mattjegan-swarmia-mcp",
                title="Swarmia",
                name="mattjegan/swarmia-mcp",
            )
        ]

    def test_missing_database_is_not_created(self, temp_dir):
        config = Config(db_path=temp_dir / "missing.db")

        with pytest.raises(sqlite3.OperationalError, match="Database not found"):
            core.list_canonical_records("instruction", config)
        assert not config.db_path.exists()


class TestFuzzyLookup:
    """Test exact-then-fuzzy slug lookups."""

    def test_exact_match(self, sample_catalog, temp_config):
        assert core.find_by_slug("instruction", "python-best-practices", config=temp_config) == "python-best-practices"

    def test_exact_match_case_insensitive(self, sample_catalog, temp_config):
        assert core.find_by_slug("agent", "Code-Reviewer", config=temp_config) == "code-reviewer"

    def test_substring_match(self, sample_catalog, temp_config):
        assert core.find_by_slug("instruction", "terraform", config=temp_config) == "azure-verified-modules-terraform"

    def test_title_match(self, sample_catalog, temp_config):
        assert core.find_by_slug("agent", "Writer", config=temp_config) == "spec-writer"

    def test_mcp_domain_match(self, sample_catalog, temp_config):
        assert core.find_by_slug("mcp", "swarmia.com", config=temp_config) == "mattjegan-swarmia-mcp"

    def test_pending_not_found(self, sample_catalog, temp_config):
        assert core.find_by_slug("instruction", "draft-instructions", config=temp_config) is None

    def test_no_match(self, sample_catalog, temp_config):
        assert core.find_by_slug("instruction", "powershell", config=temp_config) is None

    def test_like_wildcards_are_literal(self, sample_catalog, temp_config):
        assert core.find_by_slug("instruction", "%", config=temp_config) is None

    def test_specification_agent(self, sample_catalog, temp_config):
        assert core.find_specification_agent(config=temp_config) == "spec-writer"

    def test_exact_specification_slug_preferred(self, sample_catalog, temp_config):
        core.add_content("agent", "Spec", slug="specification", status="approved", config=temp_config)
        assert core.find_specification_agent(config=temp_config) == "specification"

    def test_no_specification_agent(self, temp_config):
        core.add_content("agent", "Code Reviewer", status="approved", config=temp_config)
        assert core.find_specification_agent(config=temp_config) is None
