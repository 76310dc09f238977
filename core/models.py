# /core/models.py

from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

# Shared pydantic data structures. Field aliases give the camelCase wire format
# the browser client expects.

class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Schema Information ---

class EntityTypeAttribute(WireModel):
    name: str = Field(description="The property name, e.g. 'born'.")
    types: List[str] = Field(description="Possible data types of the property, e.g. ['Long'] or ['String'].")
    mandatory: bool = Field(description="True if every entity of the type carries this property.")

class EntityType(WireModel):
    name: str = Field(description="The label or relationship type name.")
    attributes: List[EntityTypeAttribute] = Field(default_factory=list)

class NodeType(EntityType):
    count: int = Field(0, description="Number of nodes carrying this label.")

class EdgeType(EntityType):
    count: int = Field(0, description="Number of edges of this type.")

class NodeTypeConnectionInfo(WireModel):
    from_type: str = Field(alias="from")
    to_type: str = Field(alias="to")
    num_connections: int = Field(alias="numConnections")


# --- Entities ---

class Node(WireModel):
    id: int
    labels: List[str] = Field(default_factory=list)
    properties: Dict[str, Any] = Field(default_factory=dict)

class Edge(WireModel):
    id: int
    from_id: int = Field(alias="from")
    to_id: int = Field(alias="to")
    type: str
    properties: Dict[str, Any] = Field(default_factory=dict)

class NodeDescriptor(WireModel):
    id: int

class EdgeDescriptor(WireModel):
    id: int
    from_id: int = Field(alias="from")
    to_id: int = Field(alias="to")

class NodeTypeDescriptor(WireModel):
    name: str

class EdgeTypeDescriptor(WireModel):
    name: str


# --- Filtering ---

class FilterModelEntry(WireModel):
    key: str = Field(description="The property name.")
    values: List[Any] = Field(default_factory=list, description="Distinct observed values in first-seen order.")

class FilterModel(WireModel):
    name: str
    properties: List[FilterModelEntry] = Field(default_factory=list)


class OfTypeCondition(WireModel):
    type: Literal["OfType"] = "OfType"
    name: StrictStr = Field(min_length=1)

class MatchPropertyCondition(WireModel):
    type: Literal["MatchProperty"] = "MatchProperty"
    key: StrictStr = Field(min_length=1)
    value: Any

class MatchAnyCondition(WireModel):
    type: Literal["MatchAny"] = "MatchAny"
    conditions: List["FilterCondition"]

class MatchAllCondition(WireModel):
    type: Literal["MatchAll"] = "MatchAll"
    conditions: List["FilterCondition"]

FilterCondition = Annotated[
    Union[OfTypeCondition, MatchPropertyCondition, MatchAnyCondition, MatchAllCondition],
    Field(discriminator="type"),
]

MatchAnyCondition.model_rebuild()
MatchAllCondition.model_rebuild()


# --- Queries ---

class Limit(WireModel):
    nodes: Optional[Annotated[StrictInt, Field(ge=0)]] = None
    edges: Optional[Annotated[StrictInt, Field(ge=0)]] = None

class EntityFilters(WireModel):
    nodes: Optional[FilterCondition] = None
    edges: Optional[FilterCondition] = None

class LimitQuery(WireModel):
    limit: Optional[Limit] = None
    filters: Optional[EntityFilters] = None

class QueryResult(WireModel):
    nodes: List[NodeDescriptor] = Field(default_factory=list)
    edges: List[EdgeDescriptor] = Field(default_factory=list)


# --- Search ---

EntityKind = Literal["node", "edge", "node-type", "edge-type"]

class SearchIndexEntry(WireModel):
    """One indexed document. The metadata is carried next to the tokens, never re-derived from them."""
    id: Union[StrictInt, StrictStr]
    entity_type: EntityKind = Field(alias="entityType")
    from_id: Optional[int] = Field(None, alias="from")
    to_id: Optional[int] = Field(None, alias="to")
    searchable_text: List[str] = Field(default_factory=list, alias="searchableText")

class SearchResult(WireModel):
    nodes: List[NodeDescriptor] = Field(default_factory=list)
    edges: List[EdgeDescriptor] = Field(default_factory=list)
    node_types: List[NodeTypeDescriptor] = Field(default_factory=list, alias="nodeTypes")
    edge_types: List[EdgeTypeDescriptor] = Field(default_factory=list, alias="edgeTypes")
