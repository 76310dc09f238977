# /core/conditions.py

from typing import Any, Dict, Literal, Optional

from pydantic import TypeAdapter, ValidationError

from core.errors import ArgumentError, format_error_message
from core.models import (
    EntityFilters,
    FilterCondition,
    LimitQuery,
    MatchAllCondition,
    MatchAnyCondition,
    MatchPropertyCondition,
    OfTypeCondition,
)

_condition_adapter = TypeAdapter(FilterCondition)

CONDITION_TYPES = ("OfType", "MatchProperty", "MatchAny", "MatchAll")


def _argument_error(name: str, error: ValidationError) -> ArgumentError:
    first = error.errors()[0]
    location = [str(part) for part in first["loc"]]
    # The innermost union tag in the location names the condition that failed.
    for i in range(len(location) - 1, -1, -1):
        if location[i] in CONDITION_TYPES:
            name = f"{location[i]}Condition"
            location = location[i + 1:]
            break
    return ArgumentError(format_error_message(name, ".".join(location) or "type", first["msg"].lower()))


def validate_condition(raw: Any) -> FilterCondition:
    """Checks a raw JSON object to be a valid filter condition and converts it."""
    name = "FilterCondition"
    if isinstance(raw, dict) and isinstance(raw.get("type"), str):
        name = f"{raw['type']}Condition"
    try:
        return _condition_adapter.validate_python(raw)
    except ValidationError as e:
        raise _argument_error(name, e) from e


def parse_limit_query(raw: Optional[Dict[str, Any]]) -> LimitQuery:
    """
    Validates the body of a queryAll request. A missing body means no limits and no filters.
    Filter conditions are validated one by one so that errors name the failing condition.
    """
    if raw is None:
        return LimitQuery()
    if not isinstance(raw, dict):
        raise ArgumentError(format_error_message("LimitQuery", "body", "must be an object"))

    rest = dict(raw)
    filters = rest.pop("filters", None)
    if filters is not None and not isinstance(filters, dict):
        raise ArgumentError(format_error_message("LimitQuery", "filters", "must be an object"))

    entity_filters = None
    if filters is not None:
        entity_filters = EntityFilters(
            nodes=_optional_condition(filters.get("nodes")),
            edges=_optional_condition(filters.get("edges")),
        )

    try:
        query = LimitQuery.model_validate(rest)
    except ValidationError as e:
        raise _argument_error("LimitQuery", e) from e
    return LimitQuery(limit=query.limit, filters=entity_filters)


def _optional_condition(raw: Any) -> Optional[FilterCondition]:
    return None if raw is None else validate_condition(raw)


def compile_condition(
    condition: FilterCondition,
    variable: str,
    kind: Literal["node", "edge"],
    params: Dict[str, Any],
) -> str:
    """
    Renders a filter condition as a Cypher predicate on `variable`.
    Values are added to `params`; nothing user supplied ends up in the query text.
    """
    if isinstance(condition, OfTypeCondition):
        name = _add_param(params, condition.name)
        if kind == "node":
            return f"${name} IN labels({variable})"
        return f"type({variable}) = ${name}"

    if isinstance(condition, MatchPropertyCondition):
        key = _add_param(params, condition.key)
        value = _add_param(params, condition.value)
        return f"{variable}[${key}] = ${value}"

    if isinstance(condition, MatchAnyCondition):
        if not condition.conditions:
            return "false"
        parts = [compile_condition(c, variable, kind, params) for c in condition.conditions]
        return "(" + " OR ".join(parts) + ")"

    if isinstance(condition, MatchAllCondition):
        if not condition.conditions:
            return "true"
        parts = [compile_condition(c, variable, kind, params) for c in condition.conditions]
        return "(" + " AND ".join(parts) + ")"

    raise ArgumentError(f"Unsupported filter condition: {condition!r}")


def _add_param(params: Dict[str, Any], value: Any) -> str:
    name = f"p{len(params)}"
    params[name] = value
    return name
