"""Configuration loading: validates content sources and builds the process config."""

import logging
import os
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from notion_cms.models.config import NotionConfig, SourceConfig

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Fatal configuration problem; the service cannot start."""


# Sections served by a default deployment: (name, database env var, options)
_DEFAULT_SOURCES = (
    (
        "blog",
        "NOTION_BLOG_DATABASE_ID",
        {
            "base_path": "/blog",
            "page_size": 3,
            "tag_env": "NOTION_TAG_DATABASE_ID",
            "list_heading": "Latest Posts",
            "tag_heading_prefix": "Posts tagged with:",
            "content_label": "Post",
        },
    ),
    (
        "updates",
        "NOTION_UPDATES_DATABASE_ID",
        {
            "base_path": "/updates",
            "page_size": 10,
            "list_heading": "Updates",
            "tag_heading_prefix": "Updates tagged with:",
            "content_label": "Update",
        },
    ),
    (
        "changelog",
        "NOTION_CHANGELOGS_DATABASE_ID",
        {"base_path": "/changelog", "page_size": 10, "list_heading": "Changelog", "content_label": "Entry"},
    ),
    (
        "news",
        "NOTION_NEWS_DATABASE_ID",
        {"base_path": "/news", "page_size": 6, "list_heading": "News", "content_label": "Article"},
    ),
)


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'source'}: {err['msg']}" for err in exc.errors()
    )


def define_config(
    api_key: Optional[str],
    sources: Mapping[str, Any],
    **options: Any,
) -> NotionConfig:
    """Validate *sources* and return the process-wide :class:`NotionConfig`.

    Sources that fail validation are skipped with a warning so the remaining
    sections still build.

    Raises:
        ConfigurationError: when the API key is missing, no sources are
            defined, or none of them is valid.
    """
    if not api_key:
        raise ConfigurationError("Notion API key is required")
    if not sources:
        raise ConfigurationError("At least one source must be defined")

    valid: dict = {}
    for name, raw in sources.items():
        if isinstance(raw, SourceConfig):
            valid[name] = raw
            continue
        try:
            valid[name] = SourceConfig.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Source %r skipped: %s", name, _describe(exc))

    if not valid:
        raise ConfigurationError("At least one valid source with a database_id is required")

    try:
        return NotionConfig(api_key=api_key, sources=valid, **options)
    except ValidationError as exc:
        raise ConfigurationError(_describe(exc)) from exc


def load_config(environ: Optional[Mapping[str, str]] = None) -> NotionConfig:
    """Build the configuration from environment variables.

    Sections whose database id variable is unset are left out by
    :func:`define_config`.
    """
    env = os.environ if environ is None else environ

    sources: dict = {}
    for name, database_env, defaults in _DEFAULT_SOURCES:
        options = dict(defaults)
        tag_env = options.pop("tag_env", None)
        sources[name] = {
            "database_id": env.get(database_env, ""),
            "tag_database_id": env.get(tag_env) if tag_env else None,
            **options,
        }

    try:
        ttl = float(env.get("SEARCH_CACHE_TTL", "0") or 0)
    except ValueError:
        raise ConfigurationError("SEARCH_CACHE_TTL must be a number of seconds")

    return define_config(
        env.get("NOTION_API_KEY"),
        sources,
        author_database_id=env.get("NOTION_AUTHOR_DATABASE_ID") or None,
        site_name=env.get("SITE_NAME") or None,
        base_url=env.get("SITE_URL") or None,
        og_image_base=env.get("OG_IMAGE_BASE") or None,
        search_cache_ttl=ttl,
    )


def get_source(config: NotionConfig, name: str) -> SourceConfig:
    """Return the source called *name*.

    Raises:
        KeyError: if no such source is configured.
    """
    try:
        return config.sources[name]
    except KeyError:
        available = ", ".join(config.sources)
        raise KeyError(f"Source {name!r} not found. Available sources: {available}") from None
