# /core/schema_service.py

from typing import List

from core.database import GraphDBInterface
from core.entity_info import parse_entity_info
from core.models import EdgeType, NodeType, NodeTypeConnectionInfo


class SchemaService:
    """Answers questions about the node types and edge types of the graph."""
    def __init__(self, db_client: GraphDBInterface):
        self.db_client = db_client

    async def get_node_types(self) -> List[NodeType]:
        """Returns all node types with their attributes and the number of nodes per type."""
        records = await self.db_client.get_node_type_records()
        counts = await self.db_client.get_node_type_counts()
        return [
            NodeType(name=t.name, attributes=t.attributes, count=counts.get(t.name, 0))
            for t in parse_entity_info(records, "node")
        ]

    async def get_edge_types(self) -> List[EdgeType]:
        """Returns all edge types with their attributes and the number of edges per type."""
        records = await self.db_client.get_edge_type_records()
        counts = await self.db_client.get_edge_type_counts()
        return [
            EdgeType(name=t.name, attributes=t.attributes, count=counts.get(t.name, 0))
            for t in parse_entity_info(records, "edge")
        ]

    async def get_node_type_connection_info(self) -> List[NodeTypeConnectionInfo]:
        """
        Returns, for every pair of node types, the number of edges leading from
        a node of the first type to a node of the second. A node with several
        labels counts for each of them.
        """
        rows = await self.db_client.get_node_type_connections()
        return [NodeTypeConnectionInfo.model_validate(row) for row in rows]
