import logging
import logging.config
from functools import partial
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from notion_cms.models.config import NotionConfig
from notion_cms.routers.content import build_router
from notion_cms.routers.search import limiter, router as search_router
from notion_cms.routers.static_params import router as static_params_router
from notion_cms.services.config import load_config
from notion_cms.services.content_source import ContentSource
from notion_cms.services.notion_client import NotionClient
from notion_cms.services.search import SearchIndexCache, build_multi_source_search_index

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)


def create_app(config: Optional[NotionConfig] = None, client: Optional[NotionClient] = None) -> FastAPI:
    """Build the application for *config* (read from the environment when omitted).

    Run with ``uvicorn --factory notion_cms.main:create_app``.

    Raises:
        ConfigurationError: when the environment holds no usable configuration.
    """
    if config is None:
        config = load_config()
    if client is None:
        client = NotionClient(config.api_key)

    app = FastAPI(
        title="Notion CMS",
        description="Serves Notion database content as paginated, tag-filtered static-site pages.",
        version="1.0.0",
    )

    content_sources = {
        name: ContentSource(name, source, client, config.author_database_id)
        for name, source in config.sources.items()
    }

    app.state.config = config
    app.state.content_sources = content_sources
    app.state.search_cache = SearchIndexCache(
        partial(build_multi_source_search_index, client, config.sources),
        ttl=config.search_cache_ttl,
    )

    # Rate-limiting state
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception for %s", request.url)
        return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})

    app.include_router(search_router)
    app.include_router(static_params_router)
    for content_source in content_sources.values():
        app.include_router(build_router(content_source))

    @app.get("/health", summary="Health check")
    async def health() -> dict:
        return {"status": "ok", "sources": sorted(content_sources)}

    logger.info("Serving sources: %s", ", ".join(f"{s.name}={s.base_path}" for s in content_sources.values()))
    return app
