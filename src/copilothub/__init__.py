"""CopilotHub - catalog of AI-development resources with stable, redirect-aware URLs."""

from importlib.metadata import version, PackageNotFoundError

_pkg = __package__.split('.')[0]

try:
    __version__: str = version(_pkg)
except PackageNotFoundError:
    __version__: str = "0.0.1-dev"  # fallback for running directly from source

from .core import (
    # Content store
    add_content,
    get_content,
    list_content,
    set_status,
    approve_content,
    delete_content,
    list_canonical_records,
    find_by_slug,
    find_specification_agent,
    # Dataclasses
    CanonicalRecord,
    ContentItem,
)
from .normalizer import PASS_THROUGH, Redirect, RequestNormalizer
from .redirect_map import (
    RedirectMap,
    RedirectMapError,
    build_redirect_map,
    generate_redirect_map,
    load_redirect_map,
    write_redirect_map,
)

__all__ = [
    # Content store
    "add_content",
    "get_content",
    "list_content",
    "set_status",
    "approve_content",
    "delete_content",
    "list_canonical_records",
    "find_by_slug",
    "find_specification_agent",
    # Redirects
    "build_redirect_map",
    "generate_redirect_map",
    "load_redirect_map",
    "write_redirect_map",
    "RequestNormalizer",
    "PASS_THROUGH",
    "Redirect",
    "RedirectMapError",
    # Dataclasses
    "CanonicalRecord",
    "ContentItem",
    "RedirectMap",
]
