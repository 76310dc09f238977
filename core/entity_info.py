# /core/entity_info.py

from typing import Any, Dict, Iterable, List, Literal, Mapping

from core.errors import SchemaParseError
from core.models import EntityType, EntityTypeAttribute

# Column holding the type names in the result of
# 'CALL db.schema.nodeTypeProperties()' and 'CALL db.schema.relTypeProperties()'.
TYPE_NAME_COLUMNS = {
    "node": "nodeType",
    "edge": "relType",
}

LABEL_SEPARATOR = ":"


def split_type_names(type_string: str) -> List[str]:
    """
    Splits a schema label string into the bare type names.

    Example: ":`Me`:`User`" -> ["Me", "User"]
    """
    if not isinstance(type_string, str) or not type_string.startswith(LABEL_SEPARATOR):
        raise SchemaParseError(
            f"Expected a label string starting with '{LABEL_SEPARATOR}', got {type_string!r}."
        )
    # Drop the surrounding backticks of every name.
    return [token[1:-1] for token in type_string[1:].split(LABEL_SEPARATOR)]


def parse_entity_info(records: Iterable[Mapping[str, Any]], kind: Literal["node", "edge"]) -> List[EntityType]:
    """
    Converts the result of 'CALL db.schema.nodeTypeProperties()' or
    'CALL db.schema.relTypeProperties()' into a list of EntityType objects.

    Every record contributes its property to every type named in its label
    string, so multi-label nodes share the attribute. Records without a
    property name only register the type. Attributes are not merged by name.

    Args:
        records: Raw schema records (dicts or neo4j records).
        kind: Whether the records describe nodes or edges.

    Returns:
        The entity types in first-seen order.

    Raises:
        SchemaParseError: If a record does not stem from one of the schema procedures.
    """
    column = TYPE_NAME_COLUMNS[kind]

    # Insertion order of the dict is the first-seen order of the types.
    types: Dict[str, EntityType] = {}

    for record in records:
        try:
            type_string = record[column]
        except KeyError as e:
            raise SchemaParseError(f"Schema record has no '{column}' column: {dict(record)!r}") from e

        property_name = record.get("propertyName")
        attribute = None
        if property_name is not None:
            attribute = EntityTypeAttribute(
                name=property_name,
                types=list(record.get("propertyTypes") or []),
                mandatory=bool(record.get("mandatory")),
            )

        for type_name in split_type_names(type_string):
            entity_type = types.get(type_name)
            if entity_type is None:
                entity_type = EntityType(name=type_name, attributes=[])
                types[type_name] = entity_type

            if attribute is not None:
                entity_type.attributes.append(attribute)

    return list(types.values())
