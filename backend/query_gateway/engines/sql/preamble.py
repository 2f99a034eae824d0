"""
Variable preambles: session-variable SQL prepended to a query template.

Values are interpolated as text: strings are wrapped in single quotes,
everything else is rendered bare. Nothing is escaped, so a value containing
a quote changes the statement. Stored definitions and callers rely on this
literal rendering (e.g. unquoted numbers); see safety.check_preamble_safety
for the warnings raised about risky entries.
"""

from collections.abc import Mapping
from typing import Any


def render_literal(value: Any) -> str:
    """Quote text values, render the rest bare (JSON-style booleans/null)."""
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def render_mysql_preamble(variable_map: Mapping[str, Any] | None) -> str:
    """``SET @key = value; `` for every entry, in stored order."""
    if not variable_map:
        return ""
    return "".join(
        f"SET @{key} = {render_literal(value)}; "
        for key, value in variable_map.items()
    )


def render_sqlserver_preamble(variable_map: Mapping[str, Any] | None) -> str:
    """``DECLARE @key dataType = value; `` for entries shaped ``{dataType, value}``.

    Entries that are not mappings or lack a textual ``dataType`` are skipped.
    """
    if not variable_map:
        return ""
    parts: list[str] = []
    for key, entry in variable_map.items():
        if not isinstance(entry, Mapping) or not isinstance(entry.get("dataType"), str):
            continue
        parts.append(
            f"DECLARE @{key} {entry['dataType']} = {render_literal(entry.get('value'))}; "
        )
    return "".join(parts)
