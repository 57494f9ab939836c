"""HTML rendering of list, detail and not-found results through Jinja2."""

import datetime as dt
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from notion_cms.models.views import DetailView, ListView, PageMetadata, RenderResult
from notion_cms.services.blocks import render_blocks
from notion_cms.services.pagination import pagination_links

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def _parse_date(value: str):
    try:
        return dt.datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def short_date(value: str) -> str:
    """``2024-03-05`` -> ``Tue Mar 05 2024``."""
    parsed = _parse_date(value)
    return parsed.strftime("%a %b %d %Y") if parsed else value


def long_date(value: str) -> str:
    """``2024-03-05`` -> ``March 5, 2024``."""
    parsed = _parse_date(value)
    if parsed is None:
        return value
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["short_date"] = short_date
    env.filters["long_date"] = long_date
    return env


_env = _environment()


def render_page(result: RenderResult, metadata: PageMetadata) -> str:
    """Render *result* to a full HTML document."""
    if isinstance(result, ListView):
        return _env.get_template("list.html").render(
            meta=metadata,
            view=result,
            pagination=pagination_links(result.current_page, result.total_pages, result.base_path),
        )
    if isinstance(result, DetailView):
        return _env.get_template("detail.html").render(
            meta=metadata,
            view=result,
            body=Markup(render_blocks(result.blocks)),
        )
    return _env.get_template("not_found.html").render(meta=metadata, view=result)
