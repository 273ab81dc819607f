"""Create users and cats tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: accounts and geo-tagged cat records.
How:   Portable column types (string ids, float coordinates) so the same
       revision runs on PostgreSQL and SQLite.

Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        # Not unique: login takes the oldest matching row
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'user'"),
        ),
        sa.Column(
            "password",
            sa.String(255),
            nullable=False,
            comment="Argon2 hash; salt and parameters are embedded",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("idx_users_email", "users", ["email"])

    op.create_table(
        "cats",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("cat_name", sa.String(255), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column(
            "filename",
            sa.String(255),
            nullable=False,
            comment="Server-assigned photo name inside STORAGE_ROOT",
        ),
        sa.Column("birthdate", sa.Date(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        # No foreign key: cats outlive their owner's account
        sa.Column("owner_id", sa.String(36), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_cats"),
    )
    op.create_index("idx_cats_owner_id", "cats", ["owner_id"])
    op.create_index("idx_cats_location", "cats", ["longitude", "latitude"])


def downgrade() -> None:
    op.drop_index("idx_cats_location", table_name="cats")
    op.drop_index("idx_cats_owner_id", table_name="cats")
    op.drop_table("cats")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")
