"""
DB connection helpers for target databases.

Uses oracledb (Oracle), pymssql (SQL Server) or pymysql (MySQL) based on the
descriptor's dialect. Autocommit is off everywhere: the executor owns the
transaction.
"""

import math
from typing import Any

import oracledb
import pymssql
import pymysql

from query_gateway.core.config import settings
from query_gateway.core.errors import UnsupportedDialectError
from query_gateway.models import DialectEnum

from .descriptor import ConnectionDescriptor

# CLOB/BLOB columns arrive as str/bytes, readable after the connection closes.
oracledb.defaults.fetch_lobs = False

_DEFAULT_PORTS = {
    DialectEnum.SQL_SERVER: 1433,
    DialectEnum.MYSQL: 3306,
}


def _timeout_seconds(timeout_ms: int | None) -> int | None:
    if timeout_ms is None or timeout_ms <= 0:
        return None
    return max(1, math.ceil(timeout_ms / 1000))


def connect(descriptor: ConnectionDescriptor) -> Any:
    """Open a connection described by *descriptor*."""
    connect_timeout = settings.EXTERNAL_DB_CONNECT_TIMEOUT

    if descriptor.dialect == DialectEnum.ORACLE:
        params: dict[str, Any] = {
            "user": descriptor.username,
            "password": descriptor.password,
            "dsn": descriptor.connect_string,
            "tcp_connect_timeout": connect_timeout,
        }
        if descriptor.port is not None:
            params["port"] = int(descriptor.port)
        conn = oracledb.connect(**params)
        if descriptor.request_timeout_ms:
            conn.call_timeout = int(descriptor.request_timeout_ms)
        return conn

    if descriptor.dialect == DialectEnum.SQL_SERVER:
        port = descriptor.port or _DEFAULT_PORTS[DialectEnum.SQL_SERVER]
        return pymssql.connect(
            server=descriptor.host,
            port=str(port),
            database=descriptor.database,
            user=descriptor.username,
            password=descriptor.password,
            login_timeout=connect_timeout,
            timeout=_timeout_seconds(descriptor.request_timeout_ms) or 0,
            autocommit=False,
        )

    if descriptor.dialect == DialectEnum.MYSQL:
        timeout = _timeout_seconds(descriptor.request_timeout_ms)
        return pymysql.connect(
            host=descriptor.host,
            port=int(descriptor.port or _DEFAULT_PORTS[DialectEnum.MYSQL]),
            database=descriptor.database,
            user=descriptor.username,
            password=descriptor.password,
            connect_timeout=connect_timeout,
            read_timeout=timeout,
            write_timeout=timeout,
            ssl_disabled=not descriptor.encrypt,
            autocommit=False,
        )

    raise UnsupportedDialectError(descriptor.dialect)


def execute(conn: Any, sql: str, params: dict[str, Any] | None = None) -> Any:
    """Execute one statement (or T-SQL batch) and return the open cursor."""
    cur = conn.cursor()
    try:
        if params is not None:
            cur.execute(sql, params)
        else:
            cur.execute(sql)
    except Exception:
        try:
            cur.close()
        except Exception:
            pass
        raise
    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for all three drivers."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
