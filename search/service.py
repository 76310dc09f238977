# /search/service.py

import asyncio
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, ValidationError

from core.errors import SearchUnavailableError
from core.logger import get_logger
from core.models import (
    EdgeDescriptor,
    EdgeTypeDescriptor,
    NodeDescriptor,
    NodeTypeDescriptor,
    SearchResult,
)
from search.async_lazy import AsyncLazy, LazyState
from search.index_builder import SearchIndex, SearchIndexBuilder

logger = get_logger(__name__)


# --- Hit shapes, one per entity kind ---

class _Hit(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

class NodeHit(_Hit):
    entity_type: Literal["node"] = Field(alias="entityType")
    id: StrictInt

class EdgeHit(_Hit):
    entity_type: Literal["edge"] = Field(alias="entityType")
    id: StrictInt
    from_id: StrictInt = Field(alias="from")
    to_id: StrictInt = Field(alias="to")

class NodeTypeHit(_Hit):
    entity_type: Literal["node-type"] = Field(alias="entityType")
    id: StrictStr

class EdgeTypeHit(_Hit):
    entity_type: Literal["edge-type"] = Field(alias="entityType")
    id: StrictStr

SearchHit = Annotated[
    Union[NodeHit, EdgeHit, NodeTypeHit, EdgeTypeHit],
    Field(discriminator="entity_type"),
]

_hit_adapter = TypeAdapter(SearchHit)


def partition_hits(raw_hits: List[dict]) -> SearchResult:
    """
    Sorts raw hit metadata into typed descriptors per entity kind.
    Hits whose metadata does not fit their declared kind are dropped.
    """
    result = SearchResult()
    for raw in raw_hits:
        try:
            hit = _hit_adapter.validate_python(raw)
        except ValidationError as e:
            logger.debug(f"Dropping malformed search hit {raw!r}: {e.error_count()} error(s)")
            continue

        if isinstance(hit, NodeHit):
            result.nodes.append(NodeDescriptor(id=hit.id))
        elif isinstance(hit, EdgeHit):
            result.edges.append(EdgeDescriptor(id=hit.id, from_id=hit.from_id, to_id=hit.to_id))
        elif isinstance(hit, NodeTypeHit):
            result.node_types.append(NodeTypeDescriptor(name=hit.id))
        else:
            result.edge_types.append(EdgeTypeDescriptor(name=hit.id))
    return result


class SearchService:
    """
    Searches through all entities and entity types.

    The index is built on first use and then kept for the lifetime of the
    process; later changes to the graph are not reflected until restart.
    Concurrent first callers share a single build, and a failed build is
    reported to every caller from then on.
    """
    def __init__(self, index_builder: SearchIndexBuilder):
        self.index_builder = index_builder
        self._index: AsyncLazy[SearchIndex] = AsyncLazy(self._build)

    @property
    def index_state(self) -> LazyState:
        return self._index.state

    async def _build(self) -> SearchIndex:
        try:
            return await self.index_builder.build_index()
        except Exception as e:
            logger.error(f"Building the search index failed: {e}", exc_info=True)
            raise

    async def _get_index(self, timeout: Optional[float]) -> SearchIndex:
        try:
            return await self._index.get(timeout)
        except asyncio.TimeoutError as e:
            raise SearchUnavailableError("The search index is still being built.") from e
        except Exception as e:
            raise SearchUnavailableError(f"The search index could not be built: {e}") from e

    async def search(self, search_string: str, timeout: Optional[float] = None) -> SearchResult:
        """
        Returns the entities and entity types matching the search string.
        Each word is matched as a prefix, so for a node with name 'Keanu Reeves'
        the queries 'Keanu', 'kean', 'reev' and 'name' all find it.
        """
        index = await self._get_index(timeout)
        hits = index.search(search_string, prefix=True)
        return partition_hits([hit.entry.model_dump(by_alias=True) for hit in hits])

    async def get_auto_suggestions(self, search_string: str, timeout: Optional[float] = None) -> List[str]:
        index = await self._get_index(timeout)
        return [suggestion.suggestion for suggestion in index.auto_suggest(search_string)]
