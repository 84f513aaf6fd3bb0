"""Shared column and index definitions for versioned tables in migrations.

Migrations must not import the ORM models (they change over time), so the
versioned layout is restated here once for every revision that creates a
versioned table.
"""

import sqlalchemy as sa
from alembic import op


def versioned_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("business_key", sa.String(length=64), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("valid_from", sa.DateTime(), nullable=False),
        sa.Column("valid_to", sa.DateTime(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("updated_by", sa.String(length=255), nullable=True),
    ]


def versioned_constraints(table: str) -> list:
    return [
        sa.PrimaryKeyConstraint("id"),
        # Versions of a business key form a sequence without duplicates
        sa.UniqueConstraint("business_key", "version", name=f"uq_{table}_business_key_version"),
        sa.CheckConstraint("version >= 1", name=f"ck_{table}_version_positive"),
        sa.CheckConstraint(
            "valid_to IS NULL OR valid_from < valid_to",
            name=f"ck_{table}_valid_interval",
        ),
        sa.CheckConstraint(
            "is_current = (valid_to IS NULL)",
            name=f"ck_{table}_current_iff_open",
        ),
    ]


def create_versioned_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_id", table, ["id"], unique=False)
    op.create_index(f"ix_{table}_business_key_is_current", table, ["business_key", "is_current"])
    op.create_index(f"ix_{table}_tenant_id_is_current", table, ["tenant_id", "is_current"])
    # At most one open version per business key
    op.create_index(
        f"uq_{table}_business_key_current",
        table,
        ["business_key"],
        unique=True,
        sqlite_where=sa.text("is_current"),
        postgresql_where=sa.text("is_current"),
    )


def drop_versioned_indexes(table: str) -> None:
    op.drop_index(f"uq_{table}_business_key_current", table_name=table)
    op.drop_index(f"ix_{table}_tenant_id_is_current", table_name=table)
    op.drop_index(f"ix_{table}_business_key_is_current", table_name=table)
    op.drop_index(f"ix_{table}_id", table_name=table)
