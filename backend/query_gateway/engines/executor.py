"""
Query engine: turns a definition (or an ad hoc SQL text) into rows.

Per invocation: resolve the dialect, decrypt the profile's credentials,
build the connection descriptor, prepend the variable preamble and run the
SQL through a fresh QueryExecutor. Nothing is cached between invocations.
"""

import logging
from typing import Any

import oracledb
import pymssql
import pymysql
from fastapi.encoders import jsonable_encoder

from query_gateway.core.connect import decrypt_profile_fields
from query_gateway.core.errors import (
    ConfigurationError,
    GatewayError,
    NotFoundError,
)
from query_gateway.core.repository import QueryRepository
from query_gateway.core.security import CredentialCodec
from query_gateway.engines.dialects import get_dialect
from query_gateway.engines.resolver import EffectiveParameters
from query_gateway.engines.results import (
    ExecutionResult,
    QueryError,
    QueryIdentity,
    QuerySuccess,
)
from query_gateway.engines.sql.executor import QueryExecutor
from query_gateway.models import DatabaseProfile

_log = logging.getLogger(__name__)

_DRIVER_ERRORS: tuple[type[BaseException], ...] = (
    oracledb.Error,
    pymssql.Error,
    pymysql.Error,
)


_BINARY_ENCODERS: dict[Any, Any] = {
    bytes: bytes.hex,
    bytearray: bytearray.hex,
    memoryview: memoryview.hex,
}


def json_safe_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rows with every value JSON-encodable; binary columns become hex text."""
    return jsonable_encoder(rows, custom_encoder=_BINARY_ENCODERS)


def _root_cause(exc: BaseException) -> BaseException:
    while exc.__cause__ is not None:
        exc = exc.__cause__
    return exc


class QueryEngine:
    """
    run(profile, params, request_timeout_ms=None) -> rows
    process(identity, profile, params, request_timeout_ms) -> ExecutionResult
    run_adhoc(database_name, sql) -> rows
    """

    def __init__(self, repository: QueryRepository, codec: CredentialCodec) -> None:
        self.repository = repository
        self.codec = codec

    def run(
        self,
        profile: DatabaseProfile,
        params: EffectiveParameters,
        *,
        request_timeout_ms: int | None = None,
    ) -> list[dict[str, Any]]:
        """Execute *params* against *profile*. Raises GatewayError subclasses."""
        dialect = get_dialect(profile.database_type)

        warnings = dialect.preamble_warnings(params.variable_map)
        if warnings:
            _log.warning(
                "Variable preamble for database %s has unescaped entries: %s",
                profile.id,
                ", ".join(f"{w['variable']} ({w['message']})" for w in warnings),
            )
        effective = params.with_preamble(dialect.build_preamble(params.variable_map))

        fields = decrypt_profile_fields(profile, self.codec, dialect.credential_fields)
        descriptor = dialect.build_descriptor(
            fields, profile.port, request_timeout_ms=request_timeout_ms
        )
        rows = QueryExecutor(dialect, descriptor).run(
            effective.sql, effective.replacement_map
        )
        return json_safe_rows(rows)

    def process(
        self,
        identity: QueryIdentity,
        profile: DatabaseProfile | None,
        params: EffectiveParameters,
        *,
        request_timeout_ms: int | None = None,
    ) -> ExecutionResult:
        """Like run(), but every failure becomes an isolated QueryError."""
        extra = {"query_name": identity.name, "database_id": params.database_id}
        if profile is None:
            _log.error(
                "Database %s not found for query %s",
                params.database_id,
                identity.name,
                extra=extra,
            )
            return QueryError(identity)
        if not params.sql.strip():
            _log.error("Query %s has no SQL to run", identity.name, extra=extra)
            return QueryError(identity)
        try:
            rows = self.run(profile, params, request_timeout_ms=request_timeout_ms)
        except ConfigurationError as e:
            _log.critical("Gateway misconfigured: %s", e, extra=extra)
            return QueryError(identity)
        except GatewayError as e:
            cause = _root_cause(e)
            if isinstance(cause, pymysql.err.ProgrammingError):
                _log.warning("MySQL programming error in %s: %s", identity.name, cause, extra=extra)
            elif isinstance(cause, _DRIVER_ERRORS):
                _log.error("Driver error in %s: %s", identity.name, cause, extra=extra)
            else:
                _log.error("Query %s failed: %s", identity.name, e, extra=extra)
            return QueryError(identity)
        except Exception:
            _log.exception("Unexpected failure in query %s", identity.name, extra=extra)
            return QueryError(identity)
        return QuerySuccess(identity, rows)

    def run_adhoc(self, database_name: str, sql: str) -> list[dict[str, Any]]:
        """Run caller-supplied SQL against a named database, without a request timeout.

        Errors propagate to the HTTP layer (404 unknown database, 500 otherwise).
        """
        profile = self.repository.find_database_profile_by_name(database_name)
        if profile is None:
            raise NotFoundError(
                f'Database with name "{database_name}" not found.',
                "Please verify the database name and ensure it exists in the system.",
            )
        params = EffectiveParameters(
            database_id=profile.id,
            sql=sql,
            variable_map=None,
            replacement_map=None,
        )
        return self.run(profile, params)
