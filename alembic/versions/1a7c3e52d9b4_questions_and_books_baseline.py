"""questions and books baseline

Revision ID: 1a7c3e52d9b4
Revises:
Create Date: 2026-10-19 10:12:41.508113

"""
import uuid
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "1a7c3e52d9b4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_CATEGORY_ID = uuid.UUID("ea815826-0c02-e446-a984-00f62a687381")

question_status = sa.Enum("unanswered", "answered", name="questionstatus")


def upgrade() -> None:
    """Create users, catalog, personal questions and address settings."""
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_superuser", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_user_id", "user", ["id"])
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    category = op.create_table(
        "category",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "global_question",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_global_question_category_id", "global_question", ["category_id"])

    op.create_table(
        "question",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("global_question_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("answer", sa.Text(), nullable=True),
        sa.Column("status", question_status, nullable=False, server_default="unanswered"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_question_global_question_id", "question", ["global_question_id"])
    op.create_index("ix_question_category_id", "question", ["category_id"])
    op.create_index("ix_question_user_id", "question", ["user_id"])
    op.create_index("ix_question_user_status", "question", ["user_id", "status"])

    op.create_table(
        "address_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("country", sa.String(length=128), nullable=True),
        sa.Column("region", sa.String(length=128), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=True),
        sa.Column("street", sa.String(length=200), nullable=True),
        sa.Column("building", sa.String(length=32), nullable=True),
        sa.Column("apartment", sa.String(length=32), nullable=True),
        sa.Column("postal_code", sa.String(length=32), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_address_settings_user_id", "address_settings", ["user_id"], unique=True)

    # Backfill the well-known default category
    op.bulk_insert(category, [{"id": DEFAULT_CATEGORY_ID, "name": "General"}])


def downgrade() -> None:
    """Drop everything created in upgrade()."""
    op.drop_table("address_settings")
    op.drop_table("question")
    op.drop_table("global_question")
    op.drop_table("category")
    op.drop_table("user")
    question_status.drop(op.get_bind(), checkfirst=True)
