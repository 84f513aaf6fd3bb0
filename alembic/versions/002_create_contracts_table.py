"""create contracts table

Revision ID: 002
Revises: 001
Create Date: 2026-09-14 10:05:00.000000

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
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "contracts",
        *versioned_columns(),
        # References the case's business key, not a row id: the link survives new case versions
        sa.Column("case_business_key", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column("terms", sa.Text(), nullable=True),
        *versioned_constraints("contracts"),
        sa.CheckConstraint("total_amount >= 0", name="ck_contracts_total_amount_non_negative"),
    )
    create_versioned_indexes("contracts")
    op.create_index("ix_contracts_case_business_key", "contracts", ["case_business_key"])


def downgrade() -> None:
    op.drop_index("ix_contracts_case_business_key", table_name="contracts")
    drop_versioned_indexes("contracts")
    op.drop_table("contracts")
