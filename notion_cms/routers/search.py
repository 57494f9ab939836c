import logging
from typing import List, Optional

from fastapi import APIRouter, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from notion_cms.models.search import SearchIndexEntry

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(prefix="/api", tags=["Search"])


def _matches(entry: SearchIndexEntry, terms: List[str]) -> bool:
    haystack = " ".join((entry.title, entry.description, entry.keywords)).lower()
    return all(term in haystack for term in terms)


@router.get(
    "/search",
    response_model=List[SearchIndexEntry],
    summary="Search index for all content sources",
    description=(
        "Returns the flattened search index of every configured source. "
        "Without `query` the full index is returned for client-side search; "
        "with `query` only entries whose title, description or keywords contain "
        "every term are returned."
    ),
)
@limiter.limit("30/minute")
async def search(
    request: Request,
    query: Optional[str] = Query(default=None, description="Space-separated search terms."),
) -> List[SearchIndexEntry]:
    entries = await request.app.state.search_cache.get()
    if not query:
        return entries

    terms = query.lower().split()
    results = [entry for entry in entries if _matches(entry, terms)]
    logger.info("Search request", extra={"query": query, "results": len(results)})
    return results
