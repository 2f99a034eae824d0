"""
Query execution engine: dialects, parameter resolution, executor, batch fan-out.
"""

from query_gateway.engines.batch import BatchCoordinator, serialize_results
from query_gateway.engines.dialects import (
    DIALECTS,
    Dialect,
    build_descriptor,
    build_preamble,
    get_dialect,
)
from query_gateway.engines.executor import QueryEngine
from query_gateway.engines.resolver import (
    EffectiveParameters,
    resolve_effective_parameters,
    resolve_parameter,
)
from query_gateway.engines.results import (
    ExecutionResult,
    QueryError,
    QueryIdentity,
    QuerySuccess,
)

__all__ = [
    "BatchCoordinator",
    "DIALECTS",
    "Dialect",
    "EffectiveParameters",
    "ExecutionResult",
    "QueryEngine",
    "QueryError",
    "QueryIdentity",
    "QuerySuccess",
    "build_descriptor",
    "build_preamble",
    "get_dialect",
    "resolve_effective_parameters",
    "resolve_parameter",
    "serialize_results",
]
