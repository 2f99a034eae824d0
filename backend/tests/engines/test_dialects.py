"""Unit tests for engines.dialects: exhaustive registry, descriptors, statement preparation."""

import pytest

from query_gateway.core.errors import UnsupportedDialectError
from query_gateway.engines.dialects import (
    DIALECTS,
    MySqlDialect,
    OracleDialect,
    SqlServerDialect,
    build_descriptor,
    get_dialect,
)
from query_gateway.models import DialectEnum


def test_every_dialect_tag_has_an_implementation() -> None:
    assert set(DIALECTS) == set(DialectEnum)


def test_get_dialect_accepts_stored_tags() -> None:
    assert isinstance(get_dialect("MySQL"), MySqlDialect)
    assert isinstance(get_dialect("SQL Server"), SqlServerDialect)
    assert isinstance(get_dialect(DialectEnum.ORACLE), OracleDialect)


@pytest.mark.parametrize("tag", ["Postgres", "mysql", "", None])
def test_unsupported_dialect(tag: str | None) -> None:
    with pytest.raises(UnsupportedDialectError) as exc_info:
        get_dialect(tag)
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == f"Unsupported database type: {tag}."


def test_oracle_descriptor() -> None:
    descriptor = build_descriptor(
        "Oracle",
        {"username": "app", "password": "pw", "connect_string": "db/ORCL"},
        1521,
        request_timeout_ms=30_000,
    )
    assert descriptor.dialect is DialectEnum.ORACLE
    assert descriptor.connect_string == "db/ORCL"
    assert descriptor.host is None
    assert descriptor.port == 1521
    assert descriptor.request_timeout_ms == 30_000


@pytest.mark.parametrize("tag", ["SQL Server", "MySQL"])
def test_host_based_descriptor(tag: str) -> None:
    fields = {"host": "db", "database": "sales", "username": "app", "password": "pw"}
    descriptor = build_descriptor(tag, fields, None)
    assert descriptor.host == "db"
    assert descriptor.database == "sales"
    assert descriptor.encrypt is False
    assert descriptor.port is None
    assert descriptor.request_timeout_ms is None


def test_credential_fields() -> None:
    assert OracleDialect.credential_fields == ("username", "password", "connect_string")
    assert MySqlDialect.credential_fields == ("host", "database", "username", "password")


def test_mysql_prepares_one_entry_per_statement() -> None:
    prepared = get_dialect("MySQL").prepare(
        "SET @x = 5; SELECT * FROM t WHERE a = @x AND b = :b", {"b": 2}
    )
    assert prepared == [
        ("SET @x = 5", None),
        ("SELECT * FROM t WHERE a = @x AND b = %(b)s", {"b": 2}),
    ]


def test_sqlserver_prepares_a_single_batch() -> None:
    sql = "DECLARE @x INT = 5; SELECT * FROM t WHERE a = @x AND b = :b"
    assert get_dialect("SQL Server").prepare(sql, {"b": 2}) == [
        ("DECLARE @x INT = 5; SELECT * FROM t WHERE a = @x AND b = %(b)s", {"b": 2}),
    ]


def test_oracle_binds_natively() -> None:
    assert get_dialect("Oracle").prepare("SELECT * FROM t WHERE b = :b", {"b": 2}) == [
        ("SELECT * FROM t WHERE b = :b", {"b": 2}),
    ]


@pytest.mark.parametrize(
    "tag,expected",
    [
        ("SQL Server", "SELECT * FROM f WHERE path = 'C:\\' AND id = %(id)s"),
        ("Oracle", "SELECT * FROM f WHERE path = 'C:\\' AND id = :id"),
    ],
)
def test_backslash_in_literal_keeps_parameters_bound(tag: str, expected: str) -> None:
    sql = "SELECT * FROM f WHERE path = 'C:\\' AND id = :id"
    assert get_dialect(tag).prepare(sql, {"id": 7}) == [(expected, {"id": 7})]


def test_mysql_treats_backslash_as_escape() -> None:
    sql = "SET @p = 'it\\'s; fine'; SELECT :id"
    assert get_dialect("MySQL").prepare(sql, {"id": 7}) == [
        ("SET @p = 'it\\'s; fine'", None),
        ("SELECT %(id)s", {"id": 7}),
    ]
