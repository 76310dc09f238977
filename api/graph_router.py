from fastapi import APIRouter, Body, Depends, Query
from typing import Any, Dict, List, Optional

from api.dependencies import get_graph_service
from core.conditions import parse_limit_query
from core.errors import ArgumentError
from core.graph_service import GraphService
from core.models import Edge, Node, QueryResult

router = APIRouter(tags=["Graph"])


def parse_int_array(values: List[str]) -> List[int]:
    """Accepts ids both repeated (?ids=1&ids=2) and comma separated (?ids=1,2)."""
    ids = []
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                ids.append(int(part))
            except ValueError:
                raise ArgumentError(f"Validation failed: '{part}' is not an integer id.") from None
    return ids


@router.post("/queryAll", response_model=QueryResult)
async def query_all(
    body: Optional[Dict[str, Any]] = Body(None),
    service: GraphService = Depends(get_graph_service),
):
    """Returns node and edge descriptors, limited and filtered by the optional LimitQuery body."""
    return await service.query_all(parse_limit_query(body))


@router.get("/getNodesById", response_model=List[Node])
async def get_nodes_by_id(
    ids: List[str] = Query(default=[]),
    service: GraphService = Depends(get_graph_service),
):
    """Returns the nodes with the given ids, ordered by id."""
    return await service.get_nodes_by_id(parse_int_array(ids))


@router.get("/getEdgesById", response_model=List[Edge])
async def get_edges_by_id(
    ids: List[str] = Query(default=[]),
    service: GraphService = Depends(get_graph_service),
):
    """Returns the edges with the given ids, ordered by id."""
    return await service.get_edges_by_id(parse_int_array(ids))
