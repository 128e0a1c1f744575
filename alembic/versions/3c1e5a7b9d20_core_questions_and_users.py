"""core_questions_and_users

Revision ID: 3c1e5a7b9d20
Revises:
Create Date: 2026-09-01 10:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3c1e5a7b9d20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "questions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("unit", sa.String(64), nullable=True),
        sa.Column("true_value", sa.Double(), nullable=False),
        sa.Column("source_name", sa.Text(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("answer_context", sa.Text(), nullable=True),
        sa.Column("category", sa.String(128), nullable=True),
        sa.Column("distribution_tier", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_questions_tier_active", "questions", ["distribution_tier", "is_active"])
    op.create_index("idx_questions_category", "questions", ["category"])

    op.create_table(
        "daily_question_slots",
        sa.Column("slot_date", sa.Date(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("question_id", sa.String(64), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.CheckConstraint("display_order >= 0", name="ck_daily_question_slots_order_non_negative"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
        sa.PrimaryKeyConstraint("slot_date", "display_order"),
    )
    op.create_index("idx_daily_question_slots_question_id", "daily_question_slots", ["question_id"])

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("device_id", sa.String(128), nullable=True),
        sa.Column("auth_id", sa.String(64), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("username", sa.Text(), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=False, server_default=sa.text("'UTC'")),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'ACTIVE'")),
        sa.Column("merged_into_user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("total_score", sa.Double(), nullable=False, server_default=sa.text("0")),
        sa.Column("average_score", sa.Double(), nullable=False, server_default=sa.text("0")),
        sa.Column("games_played", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("session_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("questions_answered", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("questions_captured", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("calibration_rate", sa.Double(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("best_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_streak_date", sa.Date(), nullable=True),
        sa.Column("best_single_score", sa.Double(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("last_played_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("username_claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("account_claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('ACTIVE','MERGED')", name="ck_users_status"),
        sa.CheckConstraint(
            "(status = 'MERGED') = (merged_into_user_id IS NOT NULL)",
            name="ck_users_merged_link",
        ),
        sa.CheckConstraint("questions_captured <= questions_answered", name="ck_users_captured_le_answered"),
        sa.CheckConstraint("games_played >= 0", name="ck_users_games_played_non_negative"),
        sa.ForeignKeyConstraint(["merged_into_user_id"], ["users.id"]),
        sa.UniqueConstraint("device_id", name="uq_users_device_id"),
        sa.UniqueConstraint("auth_id", name="uq_users_auth_id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index(
        "uq_users_username_ci",
        "users",
        [sa.text("lower(username)")],
        unique=True,
        postgresql_where=sa.text("username IS NOT NULL AND username <> 'Guest Player'"),
    )
    op.create_index("idx_users_total_score", "users", ["total_score"])
    op.create_index("idx_users_merged_into", "users", ["merged_into_user_id"])


def downgrade() -> None:
    op.drop_index("idx_users_merged_into", table_name="users")
    op.drop_index("idx_users_total_score", table_name="users")
    op.drop_index("uq_users_username_ci", table_name="users")
    op.drop_table("users")

    op.drop_index("idx_daily_question_slots_question_id", table_name="daily_question_slots")
    op.drop_table("daily_question_slots")

    op.drop_index("idx_questions_category", table_name="questions")
    op.drop_index("idx_questions_tier_active", table_name="questions")
    op.drop_table("questions")
