"""HTTP application: redirect middleware in front of the catalog routes."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import Response

from . import __version__, core
from .config import Config, get_config
from .normalizer import RequestNormalizer
from .redirect_map import RedirectMap, load_redirect_map

logger = logging.getLogger(__name__)

router = APIRouter()


class RedirectMiddleware:
    """ASGI middleware that answers normalizer redirects before routing."""

    def __init__(self, app, normalizer: RequestNormalizer):
        self.app = app
        self.normalizer = normalizer

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Redirect targets are built from the undecoded path so "%2F" and
        # "%3F" inside a segment stay escaped
        raw_path = scope.get("raw_path")
        if raw_path:
            path = raw_path.decode("latin-1").partition("?")[0]
        else:
            path = scope["path"]
        query = scope.get("query_string", b"").decode("latin-1")
        decision = self.normalizer.normalize(path, query)
        if not decision.is_redirect:
            await self.app(scope, receive, send)
            return

        logger.debug("Redirecting %s -> %s", path, decision.location)
        response = Response(
            status_code=decision.status_code,
            headers={"location": decision.location},
        )
        await response(scope, receive, send)


def _config(request: Request) -> Config:
    return request.app.state.config


def _listing(request: Request, kind: str) -> dict:
    items = core.list_content(kind, status=core.APPROVED, config=_config(request))
    return {"items": [item.to_dict() for item in items], "count": len(items)}


def _detail(request: Request, kind: str, slug: str) -> dict:
    item = core.get_content(kind, slug, approved_only=True, config=_config(request))
    if item is None:
        raise HTTPException(status_code=404, detail=f"No {kind} found for slug '{slug}'")
    return item.to_dict()


@router.get("/health")
def health(request: Request):
    return {
        "status": "ok",
        "version": __version__,
        "redirects": request.app.state.redirect_map.stats(),
    }


@router.get("/instructions")
def list_instructions(request: Request):
    return _listing(request, "instruction")


@router.get("/instructions/{slug}")
def get_instruction(request: Request, slug: str):
    return _detail(request, "instruction", slug)


@router.get("/agents")
def list_agents(request: Request):
    return _listing(request, "agent")


@router.get("/agents/{slug}")
def get_agent(request: Request, slug: str):
    return _detail(request, "agent", slug)


@router.get("/mcps")
def list_mcps(request: Request):
    return _listing(request, "mcp")


@router.get("/mcps/{slug}")
def get_mcp(request: Request, slug: str):
    return _detail(request, "mcp", slug)


def create_app(
    config: Optional[Config] = None,
    redirect_map: Optional[RedirectMap] = None,
) -> FastAPI:
    """Create the application.

    The redirect map is loaded once here when not injected, so a missing or
    malformed artifact stops startup with RedirectMapError.
    """
    if config is None:
        config = get_config()
    if redirect_map is None:
        redirect_map = load_redirect_map(config.redirect_map_path)

    app = FastAPI(title="CopilotHub", version=__version__)
    app.state.config = config
    app.state.redirect_map = redirect_map
    app.add_middleware(RedirectMiddleware, normalizer=RequestNormalizer(redirect_map))
    app.include_router(router)
    return app
