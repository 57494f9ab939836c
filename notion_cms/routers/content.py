"""HTML page routes: one catch-all route set per content source."""

import logging
from typing import Sequence

import httpx
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from notion_cms.models.views import NotFound, RenderResult
from notion_cms.services.content_source import ContentSource
from notion_cms.services.routing import split_path
from notion_cms.services.views import render_page

logger = logging.getLogger(__name__)


def build_router(content_source: ContentSource) -> APIRouter:
    """Return the router serving ``{base_path}`` and everything below it."""
    router = APIRouter(tags=[content_source.name])
    base_path = content_source.base_path

    async def list_root(request: Request) -> HTMLResponse:
        return await _render(request, content_source, [])

    async def any_page(request: Request, segments: str) -> HTMLResponse:
        return await _render(request, content_source, split_path(segments))

    router.add_api_route(
        base_path,
        list_root,
        methods=["GET"],
        response_class=HTMLResponse,
        summary=f"{content_source.source.list_heading} (first page)",
    )
    router.add_api_route(
        f"{base_path}/{{segments:path}}",
        any_page,
        methods=["GET"],
        response_class=HTMLResponse,
        summary=f"{content_source.source.list_heading} pages, tag pages and detail pages",
    )
    return router


async def _render(request: Request, content_source: ContentSource, segments: Sequence[str]) -> HTMLResponse:
    config = request.app.state.config
    result = await _resolve(content_source, segments)
    metadata = content_source.build_metadata(
        result,
        site_name=config.site_name,
        base_url=config.base_url,
        og_image_base=config.og_image_base,
    )
    status_code = 404 if isinstance(result, NotFound) else 200
    return HTMLResponse(render_page(result, metadata), status_code=status_code)


async def _resolve(content_source: ContentSource, segments: Sequence[str]) -> RenderResult:
    """Resolve *segments* and propagate upstream errors as HTTP exceptions."""
    path = "/".join([content_source.base_path, *segments])
    try:
        return await content_source.resolve(segments)
    except httpx.TimeoutException:
        logger.error("Timeout fetching content for %s", path)
        raise HTTPException(status_code=504, detail="The content API timed out.")
    except httpx.HTTPStatusError as exc:
        logger.error("Content API error for %s: %s", path, exc)
        raise HTTPException(
            status_code=502, detail=f"Content API returned HTTP {exc.response.status_code}."
        )
    except httpx.RequestError as exc:
        logger.error("Error fetching content for %s: %s", path, exc)
        raise HTTPException(status_code=502, detail=str(exc))
