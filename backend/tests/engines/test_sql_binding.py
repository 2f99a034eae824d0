"""Unit tests for engines.sql.binding: named placeholders and statement splitting."""

import pytest

from query_gateway.engines.sql.binding import (
    bind_parameters,
    find_named_placeholders,
    split_statements,
)


def test_pyformat_rewrites_placeholders_outside_literals() -> None:
    sql, params = bind_parameters(
        "SELECT * FROM t WHERE id = :id AND note = ':id'", {"id": 5}, "pyformat"
    )
    assert sql == "SELECT * FROM t WHERE id = %(id)s AND note = ':id'"
    assert params == {"id": 5}


def test_named_style_keeps_placeholders() -> None:
    sql, params = bind_parameters("SELECT * FROM t WHERE id = :id", {"id": 5}, "named")
    assert sql == "SELECT * FROM t WHERE id = :id"
    assert params == {"id": 5}


def test_sequence_values_expand() -> None:
    sql, params = bind_parameters("WHERE id IN (:ids)", {"ids": [1, 2]}, "pyformat")
    assert sql == "WHERE id IN (%(ids_0)s, %(ids_1)s)"
    assert params == {"ids_0": 1, "ids_1": 2}

    sql, params = bind_parameters("WHERE id IN (:ids)", {"ids": (7, 8)}, "named")
    assert sql == "WHERE id IN (:ids_0, :ids_1)"
    assert params == {"ids_0": 7, "ids_1": 8}


def test_percent_signs_are_escaped_for_pyformat() -> None:
    sql, _ = bind_parameters(
        "SELECT * FROM t WHERE name LIKE 'a%' AND id = :id", {"id": 1}, "pyformat"
    )
    assert sql == "SELECT * FROM t WHERE name LIKE 'a%%' AND id = %(id)s"


def test_without_replacements_sql_is_untouched() -> None:
    sql = "SELECT * FROM t WHERE name LIKE 'a%' AND id = :id"
    assert bind_parameters(sql, None, "pyformat") == (sql, None)
    assert bind_parameters("SELECT 1", {"id": 1}, "pyformat") == ("SELECT 1", None)


def test_missing_value_raises() -> None:
    with pytest.raises(ValueError, match="region"):
        bind_parameters("SELECT :id, :region", {"id": 1}, "pyformat")


def test_casts_comments_and_quotes_are_not_placeholders() -> None:
    sql = (
        "-- filter by :ignored\n"
        "SELECT x::int, \"col:name\", `b:c` /* :also */ FROM t WHERE a = :a AND b = :b AND a2 = :a"
    )
    assert find_named_placeholders(sql) == ["a", "b"]


def test_split_statements_respects_literals_and_comments() -> None:
    sql = "SET @x = 'a;b'; -- done; really\nSELECT @x AS x;  ; SELECT 2"
    assert split_statements(sql) == [
        "SET @x = 'a;b'",
        "-- done; really\nSELECT @x AS x",
        "SELECT 2",
    ]


def test_split_statements_handles_mysql_escaped_quotes() -> None:
    assert split_statements(
        "SELECT 'it''s; fine'; SELECT 'a\\';b'", backslash_escapes=True
    ) == [
        "SELECT 'it''s; fine'",
        "SELECT 'a\\';b'",
    ]


def test_backslash_is_plain_text_in_standard_literals() -> None:
    # T-SQL/Oracle: 'C:\' is a complete literal
    sql = "SELECT * FROM f WHERE path = 'C:\\' AND id = :id"

    assert bind_parameters(sql, {"id": 7}, "pyformat") == (
        "SELECT * FROM f WHERE path = 'C:\\' AND id = %(id)s",
        {"id": 7},
    )
    assert bind_parameters(sql, {"id": 7}, "named") == (sql, {"id": 7})
    assert split_statements("SELECT 'C:\\'; SELECT :id") == ["SELECT 'C:\\'", "SELECT :id"]


def test_backslash_escapes_quote_in_mysql_literals() -> None:
    sql = "SELECT * FROM f WHERE note = 'it\\'s :id' AND id = :id"

    assert bind_parameters(sql, {"id": 7}, "pyformat", backslash_escapes=True) == (
        "SELECT * FROM f WHERE note = 'it\\'s :id' AND id = %(id)s",
        {"id": 7},
    )
