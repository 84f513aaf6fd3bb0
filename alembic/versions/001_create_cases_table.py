"""create cases table

Revision ID: 001
Revises:
Create Date: 2026-09-14 10:00:00.000000

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
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cases",
        *versioned_columns(),
        sa.Column("decedent_name", sa.String(length=255), nullable=False),
        sa.Column("case_type", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=False),
        *versioned_constraints("cases"),
        sa.CheckConstraint("amount >= 0", name="ck_cases_amount_non_negative"),
    )
    create_versioned_indexes("cases")


def downgrade() -> None:
    drop_versioned_indexes("cases")
    op.drop_table("cases")
