"""Unit tests for core.connect: driver dispatch, cursor helpers, profile decryption."""

from unittest.mock import MagicMock, patch

import pytest

from query_gateway.core.config import settings
from query_gateway.core.connect import (
    ConnectionDescriptor,
    connect,
    cursor_to_dicts,
    decrypt_profile_fields,
    execute,
)
from query_gateway.core.errors import UnsupportedDialectError
from query_gateway.core.security import CredentialCodec
from query_gateway.models import DialectEnum
from tests.utils.repository import InMemoryQueryRepository, create_profile


def _descriptor(dialect: DialectEnum, **kwargs) -> ConnectionDescriptor:
    values = {
        "dialect": dialect,
        "username": "app",
        "password": "s3cret",
        "host": "db.internal",
        "database": "sales",
    }
    values.update(kwargs)
    return ConnectionDescriptor(**values)


@patch("pymysql.connect")
def test_connect_mysql_batch_timeouts(mock_connect: MagicMock) -> None:
    conn = connect(_descriptor(DialectEnum.MYSQL, request_timeout_ms=30_000))

    assert conn is mock_connect.return_value
    mock_connect.assert_called_once_with(
        host="db.internal",
        port=3306,
        database="sales",
        user="app",
        password="s3cret",
        connect_timeout=settings.EXTERNAL_DB_CONNECT_TIMEOUT,
        read_timeout=30,
        write_timeout=30,
        ssl_disabled=True,
        autocommit=False,
    )


@patch("pymysql.connect")
def test_connect_mysql_without_request_timeout(mock_connect: MagicMock) -> None:
    connect(_descriptor(DialectEnum.MYSQL, port=3307))

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["port"] == 3307
    assert kwargs["read_timeout"] is None
    assert kwargs["write_timeout"] is None


@patch("pymssql.connect")
def test_connect_sqlserver(mock_connect: MagicMock) -> None:
    connect(_descriptor(DialectEnum.SQL_SERVER, request_timeout_ms=30_000))

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["server"] == "db.internal"
    assert kwargs["port"] == "1433"
    assert kwargs["database"] == "sales"
    assert kwargs["timeout"] == 30
    assert kwargs["login_timeout"] == settings.EXTERNAL_DB_CONNECT_TIMEOUT
    assert kwargs["autocommit"] is False


@patch("pymssql.connect")
def test_connect_sqlserver_adhoc_has_no_query_timeout(mock_connect: MagicMock) -> None:
    connect(_descriptor(DialectEnum.SQL_SERVER))
    assert mock_connect.call_args.kwargs["timeout"] == 0


@patch("oracledb.connect")
def test_connect_oracle_uses_connect_string(mock_connect: MagicMock) -> None:
    descriptor = ConnectionDescriptor(
        dialect=DialectEnum.ORACLE,
        username="app",
        password="s3cret",
        connect_string="db.internal/ORCLPDB1",
        request_timeout_ms=30_000,
    )

    conn = connect(descriptor)

    mock_connect.assert_called_once_with(
        user="app",
        password="s3cret",
        dsn="db.internal/ORCLPDB1",
        tcp_connect_timeout=settings.EXTERNAL_DB_CONNECT_TIMEOUT,
    )
    assert conn.call_timeout == 30_000


@patch("oracledb.connect")
def test_connect_oracle_passes_port(mock_connect: MagicMock) -> None:
    connect(
        ConnectionDescriptor(
            dialect=DialectEnum.ORACLE,
            username="app",
            password="s3cret",
            connect_string="db.internal/ORCLPDB1",
            port=1522,
        )
    )
    assert mock_connect.call_args.kwargs["port"] == 1522


def test_connect_unknown_dialect() -> None:
    with pytest.raises(UnsupportedDialectError):
        connect(_descriptor("Postgres"))  # type: ignore[arg-type]


def test_descriptor_repr_hides_credentials() -> None:
    text = repr(_descriptor(DialectEnum.MYSQL))
    assert "s3cret" not in text
    assert "db.internal" not in text
    assert "MYSQL" in text or "MySQL" in text


def test_execute_without_params_does_not_pass_mapping() -> None:
    conn = MagicMock()
    cur = execute(conn, "SELECT 1")
    cur.execute.assert_called_once_with("SELECT 1")


def test_execute_closes_cursor_on_error() -> None:
    conn = MagicMock()
    conn.cursor.return_value.execute.side_effect = RuntimeError("syntax error")

    with pytest.raises(RuntimeError):
        execute(conn, "SELEC 1", {"a": 1})

    conn.cursor.return_value.close.assert_called_once()


def test_cursor_to_dicts() -> None:
    cur = MagicMock()
    cur.description = [("id",), ("name",)]
    cur.fetchall.return_value = [(1, "a"), (2, "b")]
    assert cursor_to_dicts(cur) == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]

    cur.description = None
    assert cursor_to_dicts(cur) == []


def test_decrypt_profile_fields_only_requested(codec: CredentialCodec) -> None:
    profile = create_profile(
        InMemoryQueryRepository(),
        codec,
        database=None,
        username="reporter",
        password="pw",
    )

    fields = decrypt_profile_fields(profile, codec, ("username", "password", "database"))

    assert fields == {"username": "reporter", "password": "pw", "database": ""}


def test_oracle_lobs_are_fetched_as_values() -> None:
    import oracledb

    assert oracledb.defaults.fetch_lobs is False
