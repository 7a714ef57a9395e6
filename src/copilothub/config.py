"""Configuration management for copilothub."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


# Default paths
DEFAULT_APP_DIR = Path.home() / ".copilothub"
DEFAULT_DB_PATH = DEFAULT_APP_DIR / "catalog.db"
DEFAULT_REDIRECT_MAP_PATH = DEFAULT_APP_DIR / "redirect-map.json"
DEFAULT_CONFIG_PATH = DEFAULT_APP_DIR / "config.yaml"

DEFAULT_INSTRUCTION_SUFFIXES = (
    "-instructions",
    "-guidelines",
    "-best-practices",
    "-conventions",
)
DEFAULT_ABBREVIATIONS = (
    "avm", "api", "sdk", "cli", "ui", "ux", "db", "sql", "http", "https",
    "json", "xml", "yaml", "md", "ts", "js", "py", "rb", "go", "rs",
)
DEFAULT_DOMAIN_SUFFIXES = (".com", ".org", ".net", ".io", ".dev")
DEFAULT_EXCLUDED_PREFIXES = ("mattjegan", "github", "user", "author")


def _expand_path(value: str) -> Path:
    """Expand ${VAR} references and ~ in a configured path."""
    return Path(os.path.expandvars(value)).expanduser()


@dataclass
class AliasRules:
    """Heuristic tables used when deriving redirect aliases."""
    instruction_suffixes: tuple[str, ...] = DEFAULT_INSTRUCTION_SUFFIXES
    abbreviations: tuple[str, ...] = DEFAULT_ABBREVIATIONS
    domain_suffixes: tuple[str, ...] = DEFAULT_DOMAIN_SUFFIXES
    excluded_prefixes: tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES
    min_domain_token_length: int = 4
    max_domain_aliases: Optional[int] = None  # None means unbounded
    spec_token: str = "specification"

    def __post_init__(self):
        # YAML gives us lists; normalize so the rules stay hashable and ordered
        self.instruction_suffixes = tuple(s.lower() for s in self.instruction_suffixes)
        self.abbreviations = tuple(a.lower() for a in self.abbreviations)
        self.domain_suffixes = tuple(
            s.lower() if s.startswith(".") else f".{s.lower()}"
            for s in self.domain_suffixes
        )
        self.excluded_prefixes = tuple(p.lower() for p in self.excluded_prefixes)
        if self.max_domain_aliases is not None and self.max_domain_aliases < 0:
            raise ValueError("max_domain_aliases must be >= 0")

    @classmethod
    def from_dict(cls, data: dict) -> "AliasRules":
        """Build rules from a config mapping, keeping defaults for missing keys."""
        defaults = cls()
        return cls(
            instruction_suffixes=data.get("instruction_suffixes", defaults.instruction_suffixes),
            abbreviations=data.get("abbreviations", defaults.abbreviations),
            domain_suffixes=data.get("domain_suffixes", defaults.domain_suffixes),
            excluded_prefixes=data.get("excluded_prefixes", defaults.excluded_prefixes),
            min_domain_token_length=data.get(
                "min_domain_token_length", defaults.min_domain_token_length
            ),
            max_domain_aliases=data.get("max_domain_aliases", defaults.max_domain_aliases),
            spec_token=data.get("spec_token", defaults.spec_token),
        )

    def to_dict(self) -> dict:
        data = {
            "instruction_suffixes": list(self.instruction_suffixes),
            "abbreviations": list(self.abbreviations),
            "domain_suffixes": list(self.domain_suffixes),
            "excluded_prefixes": list(self.excluded_prefixes),
            "min_domain_token_length": self.min_domain_token_length,
            "spec_token": self.spec_token,
        }
        if self.max_domain_aliases is not None:
            data["max_domain_aliases"] = self.max_domain_aliases
        return data


@dataclass
class Config:
    """Main configuration."""
    db_path: Path = DEFAULT_DB_PATH
    redirect_map_path: Path = DEFAULT_REDIRECT_MAP_PATH
    aliases: AliasRules = field(default_factory=AliasRules)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        db_path = DEFAULT_DB_PATH
        if "db_path" in data:
            db_path = _expand_path(str(data["db_path"]))

        redirect_map_path = DEFAULT_REDIRECT_MAP_PATH
        if "redirect_map_path" in data:
            redirect_map_path = _expand_path(str(data["redirect_map_path"]))

        return cls(
            db_path=db_path,
            redirect_map_path=redirect_map_path,
            aliases=AliasRules.from_dict(data.get("aliases") or {}),
        )

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "db_path": str(self.db_path),
            "redirect_map_path": str(self.redirect_map_path),
            "aliases": self.aliases.to_dict(),
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load(_config_path_from_env())
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = Config.load(_config_path_from_env())
    return _config


def _config_path_from_env() -> Optional[Path]:
    value = os.environ.get("COPILOTHUB_CONFIG")
    return Path(value).expanduser() if value else None


def active_config_path() -> Path:
    """The config file in effect: $COPILOTHUB_CONFIG, or the default location."""
    return _config_path_from_env() or DEFAULT_CONFIG_PATH
