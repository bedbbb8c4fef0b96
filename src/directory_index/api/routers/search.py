"""Routes for free-text search and autocomplete."""

from typing import Annotated, List

from fastapi import APIRouter, Query

from directory_index.deps import SearchServiceDep
from directory_index.schemas import SearchQuery, SearchResult

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResult)
async def search(
    query: Annotated[SearchQuery, Query()],
    search_service: SearchServiceDep,
) -> SearchResult:
    """Businesses matching every term of ``q`` plus the categories that mention them."""
    return await search_service.search(query)


@router.get("/suggestions", response_model=List[str])
async def suggestions(
    search_service: SearchServiceDep,
    q: Annotated[str, Query(max_length=200)] = "",
) -> List[str]:
    return await search_service.suggest(q)
