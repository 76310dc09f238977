from fastapi import APIRouter, Depends, Request
from typing import List
from urllib.parse import unquote_plus

from api.dependencies import get_search_service
from core.models import SearchResult
from search.service import SearchService

router = APIRouter(
    prefix="/search",
    tags=["Search"]
)


def read_search_string(request: Request) -> str:
    """
    The whole query string is the search string (/search/all?Keanu%20Reeves).
    An explicit ?q= parameter is accepted as well.
    """
    search_string = request.query_params.get("q")
    if search_string is None:
        search_string = unquote_plus(request.url.query)
    return search_string


@router.get("/all", response_model=SearchResult)
async def search_all(request: Request, service: SearchService = Depends(get_search_service)):
    """Searches all nodes, edges, node types and edge types by word prefixes."""
    return await service.search(read_search_string(request))


@router.get("/auto-suggest", response_model=List[str])
async def auto_suggest(request: Request, service: SearchService = Depends(get_search_service)):
    """Returns completions of the search string, best first."""
    return await service.get_auto_suggestions(read_search_string(request))
