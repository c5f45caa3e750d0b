"""Initial WeddingRSVP schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "rsvps",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("guests", sa.JSON(), nullable=True),
        sa.Column("attending", sa.Boolean(), nullable=True),
        sa.Column("plus_one", sa.Boolean(), nullable=False),
        sa.Column("plus_one_name", sa.String(length=255), nullable=False),
        sa.Column("plus_one_meal_choice", sa.String(length=64), nullable=False),
        sa.Column("meal_choice", sa.String(length=64), nullable=False),
        sa.Column("accommodation", sa.Boolean(), nullable=False),
        sa.Column("number_of_kids", sa.Integer(), nullable=False),
        sa.Column("submitted", sa.Boolean(), nullable=False),
        sa.Column("is_predefined", sa.Boolean(), nullable=False),
        sa.Column("ask_for_plus_one", sa.Boolean(), nullable=False),
        sa.Column("ask_for_kids", sa.Boolean(), nullable=False),
        sa.Column("max_number_of_kids", sa.Integer(), nullable=False),
        sa.Column("ask_for_accommodation", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_modified", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rsvps_name", "rsvps", ["name"], unique=True)

    op.create_table(
        "admin_sessions",
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("token"),
    )
    op.create_index(
        "ix_admin_sessions_expires_at", "admin_sessions", ["expires_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_admin_sessions_expires_at", table_name="admin_sessions")
    op.drop_table("admin_sessions")
    op.drop_index("ix_rsvps_name", table_name="rsvps")
    op.drop_table("rsvps")
