import logging
from typing import List

import httpx
from fastapi import APIRouter, HTTPException, Request

from notion_cms.models.route import StaticParamEntry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Static export"])


@router.get(
    "/static-params/{source_name}",
    response_model=List[StaticParamEntry],
    summary="List every statically renderable path of a source",
    description=(
        "Root, pagination, detail, tag and tag pagination paths for the named "
        "source, for use by the static exporter."
    ),
)
async def static_params(request: Request, source_name: str) -> List[StaticParamEntry]:
    content_source = request.app.state.content_sources.get(source_name)
    if content_source is None:
        available = ", ".join(request.app.state.content_sources)
        raise HTTPException(
            status_code=404,
            detail=f"Source {source_name!r} not found. Available sources: {available}",
        )

    try:
        params = await content_source.static_params()
    except httpx.HTTPStatusError as exc:
        logger.error("Content API error generating static params for %s: %s", source_name, exc)
        raise HTTPException(
            status_code=502, detail=f"Content API returned HTTP {exc.response.status_code}."
        )
    except httpx.RequestError as exc:
        logger.error("Error generating static params for %s: %s", source_name, exc)
        raise HTTPException(status_code=502, detail=str(exc))

    base_path = content_source.base_path
    return [StaticParamEntry(segments=p.segments, path=p.path(base_path)) for p in params]
