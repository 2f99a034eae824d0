"""
Metadata repository: the engine's only view of the metadata store.

``QueryRepository`` is the interface injected into the engine (tests use an
in-memory fake). ``SQLModelQueryRepository`` implements it over the
SQLModel tables.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, SQLModel, col, select

from query_gateway.core.errors import ValidationError
from query_gateway.models import DatabaseProfile, QueryDefinition

# Values treated as a set-membership ("in") constraint.
_SEQUENCE_TYPES = (list, tuple, set, frozenset)


class QueryRepository(Protocol):
    def find_database_profile(self, database_id: Any) -> DatabaseProfile | None: ...

    def find_database_profile_by_name(self, name: str) -> DatabaseProfile | None: ...

    def find_query_definitions(
        self, filter_map: Mapping[str, Any] | None
    ) -> list[QueryDefinition]: ...


def is_sequence_filter(value: Any) -> bool:
    return isinstance(value, _SEQUENCE_TYPES)


def coerce_profile_id(value: Any) -> int | None:
    """Integer id for a stored or overridden ``database_id``; None when it is not one.

    Booleans and non-integral floats are rejected rather than truncated.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def build_filter_clauses(
    model: type[SQLModel], filter_map: Mapping[str, Any]
) -> list[ColumnElement[bool]]:
    """One clause per filter key: ``col = value``, or ``col IN (...)`` for sequences.

    Raises ValidationError for keys that are not columns of *model*.
    """
    columns = model.__table__.columns  # type: ignore[attr-defined]
    clauses: list[ColumnElement[bool]] = []
    for key, value in filter_map.items():
        if key not in columns:
            raise ValidationError(
                f"Unknown filter field: {key}.",
                "Please filter only on fields of the query definition.",
            )
        column = col(getattr(model, key))
        if is_sequence_filter(value):
            clauses.append(column.in_(list(value)))
        else:
            clauses.append(column == value)
    return clauses


class SQLModelQueryRepository:
    """QueryRepository over a SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_database_profile(self, database_id: Any) -> DatabaseProfile | None:
        profile_id = coerce_profile_id(database_id)
        if profile_id is None:
            return None
        return self.session.get(DatabaseProfile, profile_id)

    def find_database_profile_by_name(self, name: str) -> DatabaseProfile | None:
        return self.session.exec(
            select(DatabaseProfile).where(DatabaseProfile.name == name)
        ).first()

    def find_query_definitions(
        self, filter_map: Mapping[str, Any] | None
    ) -> list[QueryDefinition]:
        """Definitions matching every filter; all active ones without a filter."""
        stmt = select(QueryDefinition)
        if isinstance(filter_map, Mapping):
            stmt = stmt.where(*build_filter_clauses(QueryDefinition, filter_map))
        else:
            stmt = stmt.where(col(QueryDefinition.is_query_active).is_(True))
        stmt = stmt.order_by(col(QueryDefinition.id))
        return list(self.session.exec(stmt).all())
