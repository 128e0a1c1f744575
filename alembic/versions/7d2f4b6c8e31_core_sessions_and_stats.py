"""core_sessions_and_stats

Revision ID: 7d2f4b6c8e31
Revises: 3c1e5a7b9d20
Create Date: 2026-09-01 10:30:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "7d2f4b6c8e31"
down_revision: str | None = "3c1e5a7b9d20"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "game_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("play_date", sa.Date(), nullable=False),
        sa.Column("question_ids", postgresql.ARRAY(sa.String(64)), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("result_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finalized_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('CREATED','ANSWERING','FINALIZED')", name="ck_game_sessions_status"),
        sa.CheckConstraint(
            "(status = 'FINALIZED') = (finalized_at IS NOT NULL AND result_payload IS NOT NULL)",
            name="ck_game_sessions_finalized_consistency",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("user_id", "play_date", name="uq_game_sessions_user_play_date"),
    )
    op.create_index("idx_game_sessions_play_date", "game_sessions", ["play_date"])

    op.create_table(
        "session_answers",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("question_id", sa.String(64), nullable=False),
        sa.Column("lower_bound", sa.Double(), nullable=False),
        sa.Column("upper_bound", sa.Double(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("lower_bound <= upper_bound", name="ck_session_answers_bounds_order"),
        sa.ForeignKeyConstraint(["session_id"], ["game_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
        sa.UniqueConstraint("session_id", "question_id", name="uq_session_answers_session_question"),
    )

    op.create_table(
        "answer_records",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("question_id", sa.String(64), nullable=False),
        sa.Column("play_date", sa.Date(), nullable=False),
        sa.Column("lower_bound", sa.Double(), nullable=True),
        sa.Column("upper_bound", sa.Double(), nullable=True),
        sa.Column("true_value_at_response", sa.Double(), nullable=False),
        sa.Column("is_hit", sa.Boolean(), nullable=False),
        sa.Column("was_answered", sa.Boolean(), nullable=False),
        sa.Column("score", sa.Double(), nullable=False),
        sa.Column("category", sa.String(128), nullable=True),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["session_id"], ["game_sessions.id"]),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
    )
    op.create_index("idx_answer_records_user_answered", "answer_records", ["user_id", "answered_at"])
    op.create_index("idx_answer_records_play_date", "answer_records", ["play_date"])
    op.create_index("idx_answer_records_score", "answer_records", ["score"])
    op.create_index("idx_answer_records_session", "answer_records", ["session_id"])

    op.create_table(
        "user_category_stats",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category", sa.String(128), nullable=False),
        sa.Column("questions_answered", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("questions_captured", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_score", sa.Double(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_answered_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "questions_captured <= questions_answered",
            name="ck_user_category_stats_captured_le_answered",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("user_id", "category"),
    )

    op.create_table(
        "question_stats",
        sa.Column("question_id", sa.String(64), nullable=False),
        sa.Column("response_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("score_sum", sa.Double(), nullable=False, server_default=sa.text("0")),
        sa.Column("score_max", sa.Double(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("response_count >= 0", name="ck_question_stats_count_non_negative"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
        sa.PrimaryKeyConstraint("question_id"),
    )

    op.create_table(
        "feedback",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("feedback_text", sa.Text(), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("page_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("char_length(feedback_text) BETWEEN 1 AND 5000", name="ck_feedback_text_length"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index("idx_feedback_created_at", "feedback", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_feedback_created_at", table_name="feedback")
    op.drop_table("feedback")
    op.drop_table("question_stats")
    op.drop_table("user_category_stats")

    op.drop_index("idx_answer_records_session", table_name="answer_records")
    op.drop_index("idx_answer_records_score", table_name="answer_records")
    op.drop_index("idx_answer_records_play_date", table_name="answer_records")
    op.drop_index("idx_answer_records_user_answered", table_name="answer_records")
    op.drop_table("answer_records")

    op.drop_table("session_answers")

    op.drop_index("idx_game_sessions_play_date", table_name="game_sessions")
    op.drop_table("game_sessions")
