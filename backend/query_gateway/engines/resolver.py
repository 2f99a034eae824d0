"""
Effective parameters for one query definition.

Precedence, highest first:
1. ``globalReplacementMap[name]`` (applies to every query in the request)
2. per-query override: ``perQuery[query_name][name]``, or the
   top-level ``<query_name>: {...}`` object
3. the value stored on the definition
4. UNDEFINED (None): the caller falls back to the dialect default

A value counts as defined unless the key is absent; an explicit JSON ``null``
overrides. Resolution never raises.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from query_gateway.models import QueryDefinition

UNDEFINED: Any = None

_MISSING = object()

# Definition fields a request may override.
OVERRIDABLE_FIELDS = ("database_id", "sql", "variable_map", "replacement_map")


def _lookup(container: Any, key: str) -> Any:
    if not isinstance(container, Mapping):
        return _MISSING
    return container.get(key, _MISSING)


def _per_query_overrides(request_body: Mapping[str, Any], query_name: str) -> Any:
    per_query = _lookup(request_body.get("perQuery"), query_name)
    if isinstance(per_query, Mapping):
        return per_query
    return _lookup(request_body, query_name)


def resolve_parameter(
    parameter_name: str,
    query_name: str,
    request_body: Any,
    stored_default: Any = None,
) -> Any:
    if isinstance(request_body, Mapping):
        value = _lookup(request_body.get("globalReplacementMap"), parameter_name)
        if value is not _MISSING:
            return value
        value = _lookup(_per_query_overrides(request_body, query_name), parameter_name)
        if value is not _MISSING:
            return value
    if stored_default is not None:
        return stored_default
    return UNDEFINED


@dataclass
class EffectiveParameters:
    """Per-invocation view of a definition after overrides; never persisted."""

    database_id: Any
    sql: str
    variable_map: Mapping[str, Any] | None
    replacement_map: Mapping[str, Any] | None

    def with_preamble(self, preamble: str) -> "EffectiveParameters":
        if not preamble:
            return self
        return EffectiveParameters(
            database_id=self.database_id,
            sql=preamble + self.sql,
            variable_map=self.variable_map,
            replacement_map=self.replacement_map,
        )


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def resolve_effective_parameters(
    definition: QueryDefinition, request_body: Any
) -> EffectiveParameters:
    resolved = {
        field: resolve_parameter(
            field, definition.name, request_body, getattr(definition, field)
        )
        for field in OVERRIDABLE_FIELDS
    }
    sql = resolved["sql"]
    return EffectiveParameters(
        database_id=resolved["database_id"],
        sql=sql if isinstance(sql, str) else "",
        variable_map=_as_mapping(resolved["variable_map"]),
        replacement_map=_as_mapping(resolved["replacement_map"]),
    )
