from fastapi import APIRouter, Depends
from typing import List

from api.dependencies import get_schema_service
from core.models import EdgeType, NodeType, NodeTypeConnectionInfo
from core.schema_service import SchemaService

router = APIRouter(
    prefix="/schema",
    tags=["Schema"]
)

@router.get("/node-types", response_model=List[NodeType])
async def get_node_types(service: SchemaService = Depends(get_schema_service)):
    """Returns information about all node types of the graph."""
    return await service.get_node_types()


@router.get("/edge-types", response_model=List[EdgeType])
async def get_edge_types(service: SchemaService = Depends(get_schema_service)):
    """Returns information about all edge types of the graph."""
    return await service.get_edge_types()


@router.get("/node-type-connection-info", response_model=List[NodeTypeConnectionInfo])
async def get_node_type_connection_info(service: SchemaService = Depends(get_schema_service)):
    """Returns the number of edges between each pair of node types."""
    return await service.get_node_type_connection_info()
