# /core/database.py

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from neo4j import AsyncGraphDatabase

from core.conditions import compile_condition
from core.config import settings
from core.logger import get_logger
from core.models import Edge, FilterCondition, Node

logger = get_logger(__name__)


class GraphDBInterface(ABC):
    """
    An abstract base class defining the standard interface for reading a graph database.
    Schema records are returned raw, in the shape of the db.schema procedures.
    """
    @abstractmethod
    async def get_all_nodes(self) -> List[Node]:
        pass

    @abstractmethod
    async def get_all_edges(self) -> List[Edge]:
        pass

    @abstractmethod
    async def get_node_type_records(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def get_edge_type_records(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def get_node_type_counts(self) -> Dict[str, int]:
        pass

    @abstractmethod
    async def get_edge_type_counts(self) -> Dict[str, int]:
        pass

    @abstractmethod
    async def get_node_type_connections(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def get_nodes_by_id(self, ids: List[int]) -> List[Node]:
        pass

    @abstractmethod
    async def get_edges_by_id(self, ids: List[int]) -> List[Edge]:
        pass

    @abstractmethod
    async def query_node_ids(self, limit: int, condition: Optional[FilterCondition] = None) -> List[int]:
        pass

    @abstractmethod
    async def query_edges_between(
        self, node_ids: List[int], limit: int, condition: Optional[FilterCondition] = None
    ) -> List[Dict[str, int]]:
        pass

    @abstractmethod
    async def sample_node_properties(self, type_name: str, limit: int) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def sample_edge_properties(self, type_name: str, limit: int) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def close(self):
        pass


def to_primitive(value: Any) -> Any:
    """Converts driver values (temporal types) into JSON friendly values."""
    if isinstance(value, list):
        return [to_primitive(item) for item in value]
    if isinstance(value, dict):
        return {key: to_primitive(item) for key, item in value.items()}
    if hasattr(value, "iso_format"):
        return value.iso_format()
    return value


NODE_FIELDS = "id(n) AS id, labels(n) AS labels, properties(n) AS properties"
EDGE_FIELDS = "id(r) AS id, id(a) AS `from`, id(b) AS `to`, type(r) AS type, properties(r) AS properties"


class Neo4jDatabase(GraphDBInterface):
    """Concrete implementation of the GraphDBInterface for Neo4j, using the async driver."""
    def __init__(self, uri: str = None, user: str = None, password: str = None, database: str = None):
        uri = uri or settings.NEO4J_URI
        user = user or settings.NEO4J_USERNAME
        password = password if password is not None else settings.NEO4J_PASSWORD
        if not all([uri, user]):
            raise ValueError("Neo4j credentials not found in settings or .env file.")
        self._driver = AsyncGraphDatabase.driver(uri, auth=(user, password))
        self._database = database or settings.NEO4J_DATABASE

    async def execute_query(self, query: str, params: Dict = None) -> List[Dict[str, Any]]:
        async with self._driver.session(database=self._database) as session:
            result = await session.run(query, params or {})
            return await result.data()

    async def get_all_nodes(self) -> List[Node]:
        rows = await self.execute_query(f"MATCH (n) RETURN {NODE_FIELDS}")
        return [self._to_node(row) for row in rows]

    async def get_all_edges(self) -> List[Edge]:
        rows = await self.execute_query(f"MATCH (a)-[r]->(b) RETURN {EDGE_FIELDS}")
        return [self._to_edge(row) for row in rows]

    async def get_node_type_records(self) -> List[Dict[str, Any]]:
        return await self.execute_query("""
        CALL db.schema.nodeTypeProperties()
        YIELD nodeType, propertyName, propertyTypes, mandatory
        RETURN nodeType, propertyName, propertyTypes, mandatory
        """)

    async def get_edge_type_records(self) -> List[Dict[str, Any]]:
        return await self.execute_query("""
        CALL db.schema.relTypeProperties()
        YIELD relType, propertyName, propertyTypes, mandatory
        RETURN relType, propertyName, propertyTypes, mandatory
        """)

    async def get_node_type_counts(self) -> Dict[str, int]:
        rows = await self.execute_query(
            "MATCH (n) UNWIND labels(n) AS name RETURN name, count(*) AS count"
        )
        return {row["name"]: row["count"] for row in rows}

    async def get_edge_type_counts(self) -> Dict[str, int]:
        rows = await self.execute_query(
            "MATCH ()-[r]->() RETURN type(r) AS name, count(r) AS count"
        )
        return {row["name"]: row["count"] for row in rows}

    async def get_node_type_connections(self) -> List[Dict[str, Any]]:
        return await self.execute_query("""
        MATCH (a)-[r]->(b)
        UNWIND labels(a) AS fromType
        UNWIND labels(b) AS toType
        RETURN fromType AS `from`, toType AS `to`, count(r) AS numConnections
        ORDER BY `from`, `to`
        """)

    async def get_nodes_by_id(self, ids: List[int]) -> List[Node]:
        rows = await self.execute_query(
            f"MATCH (n) WHERE id(n) IN $ids RETURN {NODE_FIELDS} ORDER BY id",
            {"ids": ids},
        )
        return [self._to_node(row) for row in rows]

    async def get_edges_by_id(self, ids: List[int]) -> List[Edge]:
        rows = await self.execute_query(
            f"MATCH (a)-[r]->(b) WHERE id(r) IN $ids RETURN {EDGE_FIELDS} ORDER BY id",
            {"ids": ids},
        )
        return [self._to_edge(row) for row in rows]

    async def query_node_ids(self, limit: int, condition: Optional[FilterCondition] = None) -> List[int]:
        params: Dict[str, Any] = {}
        where = ""
        if condition is not None:
            where = "WHERE " + compile_condition(condition, "n", "node", params)
        params["limit"] = limit
        rows = await self.execute_query(
            f"MATCH (n) {where} RETURN id(n) AS id ORDER BY id LIMIT $limit", params
        )
        return [row["id"] for row in rows]

    async def query_edges_between(
        self, node_ids: List[int], limit: int, condition: Optional[FilterCondition] = None
    ) -> List[Dict[str, int]]:
        params: Dict[str, Any] = {}
        predicate = ""
        if condition is not None:
            predicate = "AND " + compile_condition(condition, "r", "edge", params)
        params.update({"ids": node_ids, "limit": limit})
        return await self.execute_query(
            f"""
            MATCH (a)-[r]->(b)
            WHERE id(a) IN $ids AND id(b) IN $ids {predicate}
            RETURN id(r) AS id, id(a) AS `from`, id(b) AS `to`
            ORDER BY id LIMIT $limit
            """,
            params,
        )

    async def sample_node_properties(self, type_name: str, limit: int) -> List[Dict[str, Any]]:
        rows = await self.execute_query(
            "MATCH (n) WHERE $type IN labels(n) RETURN properties(n) AS properties LIMIT $limit",
            {"type": type_name, "limit": limit},
        )
        return [to_primitive(row["properties"]) for row in rows]

    async def sample_edge_properties(self, type_name: str, limit: int) -> List[Dict[str, Any]]:
        rows = await self.execute_query(
            "MATCH ()-[r]->() WHERE type(r) = $type RETURN properties(r) AS properties LIMIT $limit",
            {"type": type_name, "limit": limit},
        )
        return [to_primitive(row["properties"]) for row in rows]

    @staticmethod
    def _to_node(row: Dict[str, Any]) -> Node:
        return Node(id=row["id"], labels=row["labels"], properties=to_primitive(row["properties"]))

    @staticmethod
    def _to_edge(row: Dict[str, Any]) -> Edge:
        return Edge(
            id=row["id"],
            from_id=row["from"],
            to_id=row["to"],
            type=row["type"],
            properties=to_primitive(row["properties"]),
        )

    async def close(self):
        await self._driver.close()
        logger.info("Neo4j driver closed.")
