"""create payment management policies table

Revision ID: 005
Revises: 004
Create Date: 2026-09-21 09:45:00.000000

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
revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE = "payment_management_policies"


def upgrade() -> None:
    op.create_table(
        TABLE,
        *versioned_columns(),
        sa.Column("require_approval_above_amount", sa.Integer(), nullable=False),
        sa.Column("auto_approve_up_to_amount", sa.Integer(), nullable=False),
        sa.Column("max_check_age_days", sa.Integer(), nullable=False),
        sa.Column("allow_refunds", sa.Boolean(), nullable=False),
        sa.Column("max_refund_days", sa.Integer(), nullable=False),
        sa.Column("refund_approval_threshold", sa.Integer(), nullable=False),
        sa.Column("max_ach_retries", sa.Integer(), nullable=False),
        sa.Column("mark_overdue_after_days", sa.Integer(), nullable=False),
        sa.Column("interest_rate", sa.Float(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        *versioned_constraints(TABLE),
        sa.CheckConstraint(
            "interest_rate >= 0 AND interest_rate <= 0.3",
            name="ck_payment_management_policies_interest_rate_range",
        ),
    )
    create_versioned_indexes(TABLE)


def downgrade() -> None:
    drop_versioned_indexes(TABLE)
    op.drop_table(TABLE)
