"""create contact management policies table

Revision ID: 004
Revises: 003
Create Date: 2026-09-21 09:30:00.000000

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
revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE = "contact_management_policies"


def upgrade() -> None:
    # business_key is the tenant id: one version chain per funeral home
    op.create_table(
        TABLE,
        *versioned_columns(),
        sa.Column("min_duplicate_similarity_threshold", sa.Integer(), nullable=False),
        sa.Column("name_weight", sa.Integer(), nullable=False),
        sa.Column("email_weight", sa.Integer(), nullable=False),
        sa.Column("phone_weight", sa.Integer(), nullable=False),
        sa.Column("merge_field_precedence", sa.String(length=32), nullable=False),
        sa.Column("is_merge_approval_required", sa.Boolean(), nullable=False),
        sa.Column("merge_retention_days", sa.Integer(), nullable=False),
        sa.Column("merge_family_relationships_automatic", sa.Boolean(), nullable=False),
        sa.Column("ignore_duplicates_older_than_days", sa.Integer(), nullable=False),
        sa.Column("ignore_merged_contacts_in_search", sa.Boolean(), nullable=False),
        sa.Column("max_duplicates_per_search", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        *versioned_constraints(TABLE),
        sa.CheckConstraint(
            "min_duplicate_similarity_threshold BETWEEN 0 AND 100",
            name="ck_contact_management_policies_threshold_range",
        ),
        sa.CheckConstraint(
            "name_weight + email_weight + phone_weight = 100",
            name="ck_contact_management_policies_weights_total",
        ),
    )
    create_versioned_indexes(TABLE)


def downgrade() -> None:
    drop_versioned_indexes(TABLE)
    op.drop_table(TABLE)
