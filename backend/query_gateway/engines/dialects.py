"""
Dialect variants: one class per DialectEnum member.

Each dialect knows which credential fields it needs, how to turn them into a
ConnectionDescriptor, which variable preamble it renders, and how the SQL is
bound and split for its driver. ``DIALECTS`` must cover every DialectEnum
member; this is checked at import.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from query_gateway.core.connect import ConnectionDescriptor, connect
from query_gateway.core.errors import UnsupportedDialectError
from query_gateway.engines.sql.binding import (
    ParamStyle,
    bind_parameters,
    split_statements,
)
from query_gateway.engines.sql.preamble import (
    render_mysql_preamble,
    render_sqlserver_preamble,
)
from query_gateway.engines.sql.safety import check_preamble_safety
from query_gateway.models import DialectEnum


class Dialect(ABC):
    tag: ClassVar[DialectEnum]
    credential_fields: ClassVar[tuple[str, ...]]
    paramstyle: ClassVar[ParamStyle] = "pyformat"
    # True: run each ``;``-separated statement separately on the same connection.
    splits_statements: ClassVar[bool] = False
    # True: backslash escapes the next character inside quoted literals.
    backslash_escapes: ClassVar[bool] = False

    @abstractmethod
    def build_descriptor(
        self,
        fields: Mapping[str, str],
        port: int | None,
        *,
        request_timeout_ms: int | None = None,
    ) -> ConnectionDescriptor: ...

    @abstractmethod
    def build_preamble(self, variable_map: Mapping[str, Any] | None) -> str: ...

    def preamble_warnings(
        self, variable_map: Mapping[str, Any] | None
    ) -> list[dict[str, Any]]:
        return []

    def connect(self, descriptor: ConnectionDescriptor) -> Any:
        return connect(descriptor)

    def begin(self, conn: Any) -> None:  # noqa: ARG002
        """Open the transaction. DB-API drivers with autocommit off start one implicitly."""

    def prepare(
        self, sql: str, replacements: Mapping[str, Any] | None
    ) -> list[tuple[str, dict[str, Any] | None]]:
        """Statements to execute, in order, with their bound parameters."""
        escapes = self.backslash_escapes
        statements = (
            split_statements(sql, backslash_escapes=escapes)
            if self.splits_statements
            else [sql]
        )
        return [
            bind_parameters(
                stmt, replacements, self.paramstyle, backslash_escapes=escapes
            )
            for stmt in statements
        ]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.tag.value}>"


class _HostBasedDialect(Dialect):
    credential_fields = ("host", "database", "username", "password")

    def build_descriptor(
        self,
        fields: Mapping[str, str],
        port: int | None,
        *,
        request_timeout_ms: int | None = None,
    ) -> ConnectionDescriptor:
        return ConnectionDescriptor(
            dialect=self.tag,
            host=fields["host"],
            database=fields["database"],
            username=fields["username"],
            password=fields["password"],
            port=port or None,
            encrypt=False,
            request_timeout_ms=request_timeout_ms,
        )


class OracleDialect(Dialect):
    """Host/service live in the connect string; variable maps are ignored."""

    tag = DialectEnum.ORACLE
    credential_fields = ("username", "password", "connect_string")
    paramstyle = "named"

    def build_descriptor(
        self,
        fields: Mapping[str, str],
        port: int | None,
        *,
        request_timeout_ms: int | None = None,
    ) -> ConnectionDescriptor:
        return ConnectionDescriptor(
            dialect=self.tag,
            username=fields["username"],
            password=fields["password"],
            connect_string=fields["connect_string"],
            port=port or None,
            request_timeout_ms=request_timeout_ms,
        )

    def build_preamble(self, variable_map: Mapping[str, Any] | None) -> str:  # noqa: ARG002
        return ""


class SqlServerDialect(_HostBasedDialect):
    """DECLARE preamble; the whole text runs as one T-SQL batch so variables stay in scope."""

    tag = DialectEnum.SQL_SERVER

    def build_preamble(self, variable_map: Mapping[str, Any] | None) -> str:
        return render_sqlserver_preamble(variable_map)

    def preamble_warnings(
        self, variable_map: Mapping[str, Any] | None
    ) -> list[dict[str, Any]]:
        return check_preamble_safety(variable_map, sqlserver=True)


class MySqlDialect(_HostBasedDialect):
    """SET @var preamble; statements run one by one (session variables persist)."""

    tag = DialectEnum.MYSQL
    splits_statements = True
    backslash_escapes = True

    def build_preamble(self, variable_map: Mapping[str, Any] | None) -> str:
        return render_mysql_preamble(variable_map)

    def preamble_warnings(
        self, variable_map: Mapping[str, Any] | None
    ) -> list[dict[str, Any]]:
        return check_preamble_safety(variable_map)

    def begin(self, conn: Any) -> None:
        conn.begin()


DIALECTS: dict[DialectEnum, Dialect] = {
    d.tag: d for d in (OracleDialect(), SqlServerDialect(), MySqlDialect())
}

_uncovered = set(DialectEnum) - set(DIALECTS)
if _uncovered:
    raise RuntimeError(
        f"No Dialect implementation for: {', '.join(sorted(d.value for d in _uncovered))}"
    )


def get_dialect(tag: DialectEnum | str | None) -> Dialect:
    """Dialect for a stored ``database_type``; UnsupportedDialectError otherwise."""
    try:
        return DIALECTS[DialectEnum(tag)]
    except (KeyError, ValueError) as e:
        raise UnsupportedDialectError(tag) from e


def build_descriptor(
    dialect: DialectEnum | str,
    fields: Mapping[str, str],
    port: int | None,
    *,
    request_timeout_ms: int | None = None,
) -> ConnectionDescriptor:
    return get_dialect(dialect).build_descriptor(
        fields, port, request_timeout_ms=request_timeout_ms
    )


def build_preamble(
    dialect: DialectEnum | str, variable_map: Mapping[str, Any] | None
) -> str:
    return get_dialect(dialect).build_preamble(variable_map)
