from fastapi import APIRouter, Depends, Query
from typing import Optional

from api.dependencies import get_filter_service
from core.filter_model import FilterService
from core.models import FilterModel

router = APIRouter(
    prefix="/filter",
    tags=["Filter"]
)

# An empty or missing type is rejected with 400 by the service (ArgumentError).
# An unknown type is not an error and yields a model without properties.

@router.get("/node-type", response_model=FilterModel)
async def get_node_type_filter_model(
    type_name: Optional[str] = Query(None, alias="type"),
    service: FilterService = Depends(get_filter_service),
):
    """Returns the filterable properties of a node type with their observed values."""
    return await service.get_node_type_filter_model(type_name)


@router.get("/edge-type", response_model=FilterModel)
async def get_edge_type_filter_model(
    type_name: Optional[str] = Query(None, alias="type"),
    service: FilterService = Depends(get_filter_service),
):
    """Returns the filterable properties of an edge type with their observed values."""
    return await service.get_edge_type_filter_model(type_name)
