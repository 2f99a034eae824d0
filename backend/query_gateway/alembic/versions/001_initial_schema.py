"""Metadata store schema: databases, query_gateway_queries.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

Matches query_gateway.models. Connection secrets are stored encrypted
(AES-256-CBC hex text) in bytea columns.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
import sqlmodel.sql.sqltypes

revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "databases",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column(
            "database_type", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False
        ),
        sa.Column("host", sa.LargeBinary(), nullable=True),
        sa.Column("database", sa.LargeBinary(), nullable=True),
        sa.Column("username", sa.LargeBinary(), nullable=False),
        sa.Column("password", sa.LargeBinary(), nullable=False),
        sa.Column("connect_string", sa.LargeBinary(), nullable=True),
        sa.Column("port", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_databases_name"), "databases", ["name"], unique=True)

    op.create_table(
        "query_gateway_queries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column(
            "group_name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True
        ),
        sa.Column("database_id", sa.Integer(), nullable=False),
        sa.Column("sql", sa.Text(), nullable=False),
        sa.Column("variable_map", sa.JSON(), nullable=True),
        sa.Column("replacement_map", sa.JSON(), nullable=True),
        sa.Column("is_query_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["database_id"], ["databases.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_query_gateway_queries_name"), "query_gateway_queries", ["name"]
    )
    op.create_index(
        op.f("ix_query_gateway_queries_group_name"),
        "query_gateway_queries",
        ["group_name"],
    )
    op.create_index(
        op.f("ix_query_gateway_queries_database_id"),
        "query_gateway_queries",
        ["database_id"],
    )


def downgrade() -> None:
    op.drop_table("query_gateway_queries")
    op.drop_table("databases")
