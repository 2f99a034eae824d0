"""
Replacement-map binding for query templates.

Templates use ``:name`` placeholders for every dialect. For the pyformat
drivers (pymysql, pymssql) placeholders are rewritten to ``%(name)s``;
oracledb binds ``:name`` natively. Sequence values expand to one placeholder
per element so ``IN (:ids)`` works the same everywhere.

Quoted literals and comments are never touched, and ``::`` casts are not
placeholders.
"""

import re
from collections.abc import Iterator, Mapping
from typing import Any, Literal

ParamStyle = Literal["named", "pyformat"]

_PLACEHOLDER = re.compile(r"(?<![\w:]):([A-Za-z_][A-Za-z0-9_]*)")
_QUOTES = ("'", '"', "`")


def _end_of_quoted(sql: str, start: int, backslash_escapes: bool) -> int:
    """Index just past the literal opened at *start*.

    Doubled quotes are always escapes; backslashes only where the dialect
    treats them so (MySQL).
    """
    quote = sql[start]
    i = start + 1
    length = len(sql)
    while i < length:
        c = sql[i]
        if backslash_escapes and c == "\\" and i + 1 < length:
            i += 2
            continue
        if c == quote:
            if i + 1 < length and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return length


def _segments(sql: str, backslash_escapes: bool = False) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_code, text)`` chunks; literals and comments are not code."""
    i = 0
    start = 0
    length = len(sql)
    while i < length:
        ch = sql[i]
        end: int | None = None
        if ch in _QUOTES:
            end = _end_of_quoted(sql, i, backslash_escapes)
        elif sql.startswith("--", i):
            nl = sql.find("\n", i)
            end = length if nl == -1 else nl + 1
        elif sql.startswith("/*", i):
            close = sql.find("*/", i + 2)
            end = length if close == -1 else close + 2
        if end is None:
            i += 1
            continue
        if start < i:
            yield True, sql[start:i]
        yield False, sql[i:end]
        i = start = end
    if start < length:
        yield True, sql[start:]


def split_statements(sql: str, *, backslash_escapes: bool = False) -> list[str]:
    """Split SQL into statements on ``;`` while respecting literals and comments."""
    stmts: list[str] = []
    current: list[str] = []
    for is_code, text in _segments(sql, backslash_escapes):
        if not is_code:
            current.append(text)
            continue
        pieces = text.split(";")
        current.append(pieces[0])
        for piece in pieces[1:]:
            stmt = "".join(current).strip()
            if stmt:
                stmts.append(stmt)
            current = [piece]
    tail = "".join(current).strip()
    if tail:
        stmts.append(tail)
    return stmts


def find_named_placeholders(
    sql: str, *, backslash_escapes: bool = False
) -> list[str]:
    """Placeholder names in order of first appearance."""
    names: list[str] = []
    for is_code, text in _segments(sql, backslash_escapes):
        if not is_code:
            continue
        for m in _PLACEHOLDER.finditer(text):
            if m.group(1) not in names:
                names.append(m.group(1))
    return names


def _is_expandable(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def bind_parameters(
    sql: str,
    replacements: Mapping[str, Any] | None,
    paramstyle: ParamStyle,
    *,
    backslash_escapes: bool = False,
) -> tuple[str, dict[str, Any] | None]:
    """Return ``(sql, params)`` ready for ``cursor.execute``.

    Without a replacement map (or without placeholders) the SQL is returned
    unchanged with ``params=None`` so drivers skip ``%`` interpolation.
    Raises ValueError when a placeholder has no value.
    """
    if replacements is None:
        return sql, None
    names = find_named_placeholders(sql, backslash_escapes=backslash_escapes)
    if not names:
        return sql, None
    missing = [n for n in names if n not in replacements]
    if missing:
        raise ValueError(f"No value supplied for named parameter(s): {', '.join(missing)}")

    params: dict[str, Any] = {}
    rendered: dict[str, str] = {}
    for name in names:
        value = replacements[name]
        if _is_expandable(value):
            keys = [f"{name}_{i}" for i in range(len(value))] or [name]
            if value:
                params.update(zip(keys, value, strict=True))
            else:
                params[name] = None
        else:
            keys = [name]
            params[name] = value
        if paramstyle == "named":
            rendered[name] = ", ".join(f":{k}" for k in keys)
        else:
            rendered[name] = ", ".join(f"%({k})s" for k in keys)

    out: list[str] = []
    for is_code, text in _segments(sql, backslash_escapes):
        if paramstyle == "pyformat":
            text = text.replace("%", "%%")
        if is_code:
            text = _PLACEHOLDER.sub(lambda m: rendered[m.group(1)], text)
        out.append(text)
    return "".join(out), params
