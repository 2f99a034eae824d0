"""
Run one query inside its own connection and transaction.

States: IDLE -> CONNECTED -> TRANSACTION_OPEN -> EXECUTED -> COMMITTED
(or ROLLED_BACK on failure) -> CLOSED. The connection is always closed,
including when connecting failed partway.

Cleanup failures (rollback, close) never escalate: they are logged and
discarded so the primary error, if any, is the one the caller sees.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from query_gateway.core.connect import ConnectionDescriptor, cursor_to_dicts, execute
from query_gateway.core.errors import DatabaseConnectionError, QueryExecutionError

if TYPE_CHECKING:
    from query_gateway.engines.dialects import Dialect

logger = logging.getLogger(__name__)


class ExecutorState(str, Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    TRANSACTION_OPEN = "transaction_open"
    EXECUTED = "executed"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    CLOSED = "closed"


def _discard_cleanup_error(step: str, exc: BaseException, dialect: Any) -> None:
    """Cleanup policy: log the failure and carry on."""
    logger.warning(
        "%s failed during cleanup (%s); ignoring: %s",
        step,
        dialect,
        type(exc).__name__,
    )


class QueryExecutor:
    """Single-use executor for one (preamble + template) SQL text."""

    def __init__(self, dialect: "Dialect", descriptor: ConnectionDescriptor) -> None:
        self.dialect = dialect
        self.descriptor = descriptor
        self.states: list[ExecutorState] = [ExecutorState.IDLE]

    @property
    def state(self) -> ExecutorState:
        return self.states[-1]

    def _to(self, state: ExecutorState) -> None:
        self.states.append(state)

    def run(
        self, sql: str, replacements: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute *sql* and return the rows of the last result-producing statement.

        Raises DatabaseConnectionError if the connection cannot be opened and
        QueryExecutionError if the SQL fails (after rolling back).
        """
        if self.state is not ExecutorState.IDLE:
            raise RuntimeError("QueryExecutor instances are single-use")
        conn: Any = None
        try:
            try:
                conn = self.dialect.connect(self.descriptor)
            except Exception as e:
                logger.error(
                    "Connection failed for %s: %s", self.descriptor, e, exc_info=True
                )
                raise DatabaseConnectionError() from e
            self._to(ExecutorState.CONNECTED)

            try:
                self.dialect.begin(conn)
                self._to(ExecutorState.TRANSACTION_OPEN)
                rows = self._execute(conn, sql, replacements)
                self._to(ExecutorState.EXECUTED)
                conn.commit()
                self._to(ExecutorState.COMMITTED)
                return rows
            except Exception as e:
                logger.error("Query execution failed on %s: %s", self.dialect, e)
                self._rollback(conn)
                raise QueryExecutionError() from e
        finally:
            self._close(conn)

    def _execute(
        self, conn: Any, sql: str, replacements: Mapping[str, Any] | None
    ) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for statement, params in self.dialect.prepare(sql, replacements):
            logger.debug("Executing statement on %s: %s", self.dialect, statement)
            cur = execute(conn, statement, params)
            try:
                if cur.description:
                    rows = cursor_to_dicts(cur)
            finally:
                cur.close()
        return rows

    def _rollback(self, conn: Any) -> None:
        try:
            conn.rollback()
        except Exception as e:
            _discard_cleanup_error("rollback", e, self.dialect)
        self._to(ExecutorState.ROLLED_BACK)

    def _close(self, conn: Any) -> None:
        if conn is not None:
            try:
                conn.close()
            except Exception as e:
                _discard_cleanup_error("close", e, self.dialect)
        self._to(ExecutorState.CLOSED)
