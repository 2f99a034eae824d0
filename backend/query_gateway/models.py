"""
Metadata store models.

Entities: DatabaseProfile (target database + encrypted connection secrets)
and QueryDefinition (stored SQL template bound to a DatabaseProfile).
The gateway only reads these tables.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column, LargeBinary, Text
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DialectEnum(str, Enum):
    """Supported target database dialects (stored value = database_type)."""

    ORACLE = "Oracle"
    SQL_SERVER = "SQL Server"
    MYSQL = "MySQL"


# ---------------------------------------------------------------------------
# DatabaseProfile
# ---------------------------------------------------------------------------


class DatabaseProfile(SQLModel, table=True):
    __tablename__ = "databases"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, unique=True, index=True)
    # Free text: rows with an unknown dialect must fail closed at execution time.
    database_type: str = Field(max_length=64)
    # Encrypted (AES-256-CBC hex text stored as bytes, see core.security)
    host: bytes | None = Field(default=None, sa_column=Column(LargeBinary))
    database: bytes | None = Field(default=None, sa_column=Column(LargeBinary))
    username: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
    password: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
    connect_string: bytes | None = Field(
        default=None,
        sa_column=Column(LargeBinary),
        description="Oracle only; host/service are embedded in it.",
    )
    port: int | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# QueryDefinition
# ---------------------------------------------------------------------------


class QueryDefinition(SQLModel, table=True):
    __tablename__ = "query_gateway_queries"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, index=True)
    group_name: str | None = Field(default=None, max_length=255, index=True)
    database_id: int = Field(foreign_key="databases.id", index=True)
    sql: str = Field(sa_column=Column(Text, nullable=False))
    variable_map: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON),
        description="MySQL: {name: value}; SQL Server: {name: {dataType, value}}",
    )
    replacement_map: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON),
        description="Bound as :name parameters",
    )
    is_query_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
