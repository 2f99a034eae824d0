"""Tests for core.repository: filter clauses and SQLModelQueryRepository (SQLite in-memory)."""

from collections.abc import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine, select

from query_gateway.core.errors import ValidationError
from query_gateway.core.repository import (
    SQLModelQueryRepository,
    build_filter_clauses,
    coerce_profile_id,
)
from query_gateway.models import DatabaseProfile, QueryDefinition


class ReportRow(SQLModel, table=True):
    __tablename__ = "test_report_rows"

    id: int | None = Field(default=None, primary_key=True)
    status: str


def _compiled_where(model: type[SQLModel], filter_map: dict) -> str:
    stmt = select(model).where(*build_filter_clauses(model, filter_map))
    return str(stmt.compile(compile_kwargs={"literal_binds": True}))


def test_filter_map_builds_equality_and_membership() -> None:
    sql = _compiled_where(ReportRow, {"status": "active", "id": [1, 2, 3]})
    assert "test_report_rows.status = 'active'" in sql
    assert "test_report_rows.id IN (1, 2, 3)" in sql
    assert " AND " in sql


def test_filter_map_tuple_and_set_are_membership() -> None:
    assert "IN (4, 5)" in _compiled_where(ReportRow, {"id": (4, 5)})
    assert "IN (6)" in _compiled_where(ReportRow, {"id": {6}})


def test_unknown_filter_field_is_validation_error() -> None:
    with pytest.raises(ValidationError) as exc_info:
        build_filter_clauses(QueryDefinition, {"status": "active"})
    assert exc_info.value.status_code == 400
    assert "status" in exc_info.value.message


@pytest.fixture
def session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        profile = DatabaseProfile(
            name="reporting",
            database_type="MySQL",
            username=b"u",
            password=b"p",
        )
        s.add(profile)
        s.commit()
        s.refresh(profile)
        for name, group, active in [
            ("daily_sales", "sales", True),
            ("weekly_sales", "sales", True),
            ("stock_levels", "inventory", True),
            ("legacy_report", "sales", False),
        ]:
            s.add(
                QueryDefinition(
                    name=name,
                    group_name=group,
                    database_id=profile.id,
                    sql="SELECT 1",
                    is_query_active=active,
                )
            )
        s.commit()
        yield s


def _names(definitions: list[QueryDefinition]) -> list[str]:
    return [d.name for d in definitions]


def test_no_filter_selects_active_definitions(session: Session) -> None:
    repo = SQLModelQueryRepository(session)
    assert _names(repo.find_query_definitions(None)) == [
        "daily_sales",
        "weekly_sales",
        "stock_levels",
    ]


def test_empty_filter_selects_everything(session: Session) -> None:
    repo = SQLModelQueryRepository(session)
    assert len(repo.find_query_definitions({})) == 4


def test_filter_by_group_and_ids(session: Session) -> None:
    repo = SQLModelQueryRepository(session)
    assert _names(repo.find_query_definitions({"group_name": "sales"})) == [
        "daily_sales",
        "weekly_sales",
        "legacy_report",
    ]
    assert _names(
        repo.find_query_definitions({"group_name": "sales", "id": [1, 3, 4]})
    ) == ["daily_sales", "legacy_report"]


def test_find_database_profile(session: Session) -> None:
    repo = SQLModelQueryRepository(session)
    profile = repo.find_database_profile_by_name("reporting")
    assert profile is not None
    assert repo.find_database_profile(profile.id) is not None
    assert repo.find_database_profile(str(profile.id)) is not None
    assert repo.find_database_profile(999) is None
    assert repo.find_database_profile("abc") is None
    assert repo.find_database_profile(None) is None
    assert repo.find_database_profile_by_name("missing") is None


@pytest.mark.parametrize(
    "value,expected",
    [
        (3, 3),
        ("3", 3),
        (3.0, 3),
        (True, None),
        (False, None),
        (1.9, None),
        (float("nan"), None),
        ("1.5", None),
        ([1], None),
        (None, None),
    ],
)
def test_coerce_profile_id(value: object, expected: int | None) -> None:
    assert coerce_profile_id(value) == expected


def test_boolean_and_fractional_ids_match_no_profile(session: Session) -> None:
    repo = SQLModelQueryRepository(session)
    profile = repo.find_database_profile_by_name("reporting")
    assert profile is not None and profile.id == 1

    assert repo.find_database_profile(True) is None
    assert repo.find_database_profile(1.9) is None
    assert repo.find_database_profile(1.0) is not None
