"""create notes table

Revision ID: 003
Revises: 002
Create Date: 2026-09-14 10:10:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from funeral_core.db.migration_helpers import (
    create_versioned_indexes,
    drop_versioned_indexes,
    versioned_columns,
    versioned_constraints,
)

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        *versioned_columns(),
        sa.Column("case_business_key", sa.String(length=64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *versioned_constraints("notes"),
    )
    create_versioned_indexes("notes")
    op.create_index("ix_notes_case_business_key", "notes", ["case_business_key"])


def downgrade() -> None:
    op.drop_index("ix_notes_case_business_key", table_name="notes")
    drop_versioned_indexes("notes")
    op.drop_table("notes")
