"""
Static checks for variable preambles: detect potential injection risks.

Preamble values are interpolated into SQL text (see preamble.py). This does
not change what gets rendered; it reports entries that would alter the
statement structure so they can be logged and reviewed.

Usage::

    warnings = check_preamble_safety(variable_map)
    # [{"variable": "name", "message": "..."}]
"""

import re
from collections.abc import Mapping
from typing import Any

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_DATA_TYPE = re.compile(r"^[A-Za-z][A-Za-z0-9_ ]*(\(\s*(\d+|max)\s*(,\s*\d+\s*)?\))?$", re.IGNORECASE)
_RISKY_TEXT = ("'", ";", "--", "/*", "*/", "\\")


def _check_value(key: str, value: Any) -> list[dict[str, Any]]:
    warnings: list[dict[str, Any]] = []
    if isinstance(value, str):
        found = [tok for tok in _RISKY_TEXT if tok in value]
        if found:
            warnings.append(
                {
                    "variable": key,
                    "message": "Value contains SQL metacharacters "
                    f"({', '.join(found)}) and is interpolated unescaped.",
                }
            )
    elif isinstance(value, (Mapping, list, tuple)):
        warnings.append(
            {
                "variable": key,
                "message": "Structured value is rendered with str(); result is not a SQL literal.",
            }
        )
    return warnings


def check_preamble_safety(
    variable_map: Mapping[str, Any] | None, *, sqlserver: bool = False
) -> list[dict[str, Any]]:
    """Return one warning dict per risky preamble entry (never the value itself)."""
    if not variable_map:
        return []
    warnings: list[dict[str, Any]] = []
    for key, entry in variable_map.items():
        if not _IDENTIFIER.match(str(key)):
            warnings.append(
                {"variable": str(key), "message": "Variable name is not a plain identifier."}
            )
        if sqlserver:
            if not isinstance(entry, Mapping) or not isinstance(entry.get("dataType"), str):
                continue  # skipped by the renderer
            if not _DATA_TYPE.match(entry["dataType"].strip()):
                warnings.append(
                    {"variable": str(key), "message": "dataType is not a plain SQL type name."}
                )
            warnings.extend(_check_value(str(key), entry.get("value")))
        else:
            warnings.extend(_check_value(str(key), entry))
    return warnings
