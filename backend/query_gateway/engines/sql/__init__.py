"""
SQL helpers: variable preambles, parameter binding, transaction-scoped executor.
"""

from query_gateway.engines.sql.binding import bind_parameters, split_statements
from query_gateway.engines.sql.executor import ExecutorState, QueryExecutor
from query_gateway.engines.sql.preamble import (
    render_mysql_preamble,
    render_sqlserver_preamble,
)
from query_gateway.engines.sql.safety import check_preamble_safety

__all__ = [
    "ExecutorState",
    "QueryExecutor",
    "bind_parameters",
    "check_preamble_safety",
    "render_mysql_preamble",
    "render_sqlserver_preamble",
    "split_statements",
]
