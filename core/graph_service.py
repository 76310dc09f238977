# /core/graph_service.py

from typing import List

from core.config import settings
from core.database import GraphDBInterface
from core.logger import get_logger
from core.models import Edge, EdgeDescriptor, LimitQuery, Node, NodeDescriptor, QueryResult

logger = get_logger(__name__)


class GraphService:
    """Loads nodes and edges for the graph view."""
    def __init__(self, db_client: GraphDBInterface, node_limit: int = None, edge_limit: int = None):
        self.db_client = db_client
        self.node_limit = node_limit if node_limit is not None else settings.QUERY_NODE_LIMIT
        self.edge_limit = edge_limit if edge_limit is not None else settings.QUERY_EDGE_LIMIT

    async def query_all(self, query: LimitQuery = None) -> QueryResult:
        """
        Returns up to `limit.nodes` nodes matching the node filter, and up to
        `limit.edges` edges matching the edge filter whose both ends are among
        those nodes.
        """
        query = query or LimitQuery()
        node_limit, edge_limit = self.node_limit, self.edge_limit
        if query.limit is not None:
            if query.limit.nodes is not None:
                node_limit = query.limit.nodes
            if query.limit.edges is not None:
                edge_limit = query.limit.edges

        node_filter = query.filters.nodes if query.filters else None
        edge_filter = query.filters.edges if query.filters else None

        node_ids = await self.db_client.query_node_ids(node_limit, node_filter)
        edges = []
        if node_ids and edge_limit > 0:
            edges = await self.db_client.query_edges_between(node_ids, edge_limit, edge_filter)

        logger.info(f"queryAll returned {len(node_ids)} nodes and {len(edges)} edges.")
        return QueryResult(
            nodes=[NodeDescriptor(id=node_id) for node_id in node_ids],
            edges=[EdgeDescriptor.model_validate(edge) for edge in edges],
        )

    async def get_nodes_by_id(self, ids: List[int]) -> List[Node]:
        if not ids:
            return []
        return await self.db_client.get_nodes_by_id(ids)

    async def get_edges_by_id(self, ids: List[int]) -> List[Edge]:
        if not ids:
            return []
        return await self.db_client.get_edges_by_id(ids)
