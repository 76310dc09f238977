# /core/filter_model.py

from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.database import GraphDBInterface
from core.entity_info import parse_entity_info
from core.errors import ArgumentError
from core.logger import get_logger
from core.models import EntityType, FilterModel, FilterModelEntry
from core.config import settings

logger = get_logger(__name__)


def _distinct_key(value: Any):
    # True == 1 in Python, so the type takes part in the key.
    if isinstance(value, (list, tuple)):
        return ("list", tuple(_distinct_key(item) for item in value))
    try:
        hash(value)
    except TypeError:
        return (type(value).__name__, repr(value))
    return (type(value).__name__, value)


def build_filter_model(
    type_name: str,
    entity_type: Optional[EntityType],
    samples: Iterable[Mapping[str, Any]] = (),
) -> FilterModel:
    """
    Builds the filter model of one entity type.

    One entry is emitted per attribute name of the entity type, in attribute
    order. Its values are the distinct values the property took across the
    sampled entities, in first-seen order. An unknown type yields a model
    without properties.
    """
    if entity_type is None:
        return FilterModel(name=type_name, properties=[])

    entries: Dict[str, FilterModelEntry] = {}
    seen: Dict[str, set] = {}
    for attribute in entity_type.attributes:
        if attribute.name not in entries:
            entries[attribute.name] = FilterModelEntry(key=attribute.name, values=[])
            seen[attribute.name] = set()

    for properties in samples:
        for key, entry in entries.items():
            if key not in properties:
                continue
            value = properties[key]
            if value is None:
                continue
            marker = _distinct_key(value)
            if marker not in seen[key]:
                seen[key].add(marker)
                entry.values.append(value)

    return FilterModel(name=type_name, properties=list(entries.values()))


def find_entity_type(entity_types: List[EntityType], type_name: str) -> Optional[EntityType]:
    return next((t for t in entity_types if t.name == type_name), None)


class FilterService:
    """Derives filter models for node types and edge types from the live schema."""
    def __init__(self, db_client: GraphDBInterface, sample_size: int = None):
        self.db_client = db_client
        self.sample_size = sample_size or settings.FILTER_SAMPLE_SIZE

    async def get_node_type_filter_model(self, type_name: str) -> FilterModel:
        _require_type_name(type_name)
        records = await self.db_client.get_node_type_records()
        entity_type = find_entity_type(parse_entity_info(records, "node"), type_name)
        if entity_type is None:
            logger.info(f"No node type named '{type_name}', returning an empty filter model.")
            return build_filter_model(type_name, None)

        samples = await self.db_client.sample_node_properties(type_name, self.sample_size)
        return build_filter_model(type_name, entity_type, samples)

    async def get_edge_type_filter_model(self, type_name: str) -> FilterModel:
        _require_type_name(type_name)
        records = await self.db_client.get_edge_type_records()
        entity_type = find_entity_type(parse_entity_info(records, "edge"), type_name)
        if entity_type is None:
            logger.info(f"No edge type named '{type_name}', returning an empty filter model.")
            return build_filter_model(type_name, None)

        samples = await self.db_client.sample_edge_properties(type_name, self.sample_size)
        return build_filter_model(type_name, entity_type, samples)


def _require_type_name(type_name: Optional[str]):
    if not type_name:
        raise ArgumentError("The query parameter 'type' must be a non-empty string.")
