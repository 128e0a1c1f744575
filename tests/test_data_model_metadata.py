from __future__ import annotations

from sqlalchemy import CheckConstraint, UniqueConstraint

from sigma_arena.db import models  # noqa: F401
from sigma_arena.db.models.base import Base


def _check_names(table_name: str) -> set[str]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, CheckConstraint)}


def _unique_names(table_name: str) -> set[str]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, UniqueConstraint)}


def _index_names(table_name: str) -> set[str]:
    return {index.name for index in Base.metadata.tables[table_name].indexes}


def test_all_tables_registered() -> None:
    assert set(Base.metadata.tables) == {
        "questions",
        "daily_question_slots",
        "users",
        "game_sessions",
        "session_answers",
        "answer_records",
        "user_category_stats",
        "question_stats",
        "feedback",
    }


def test_one_session_per_user_and_day() -> None:
    assert "uq_game_sessions_user_play_date" in _unique_names("game_sessions")
    assert {"ck_game_sessions_status", "ck_game_sessions_finalized_consistency"} <= _check_names("game_sessions")


def test_one_answer_per_question_per_session() -> None:
    assert "uq_session_answers_session_question" in _unique_names("session_answers")
    assert "ck_session_answers_bounds_order" in _check_names("session_answers")


def test_user_identity_keys_are_unique() -> None:
    assert {"uq_users_device_id", "uq_users_auth_id", "uq_users_email"} <= _unique_names("users")
    assert "uq_users_username_ci" in _index_names("users")
    assert {"ck_users_status", "ck_users_merged_link", "ck_users_captured_le_answered"} <= _check_names("users")


def test_daily_slots_keyed_by_date_and_order() -> None:
    slots = Base.metadata.tables["daily_question_slots"]
    assert [column.name for column in slots.primary_key.columns] == ["slot_date", "display_order"]
    assert "ck_daily_question_slots_order_non_negative" in _check_names("daily_question_slots")


def test_stats_and_feedback_constraints_present() -> None:
    assert "ck_user_category_stats_captured_le_answered" in _check_names("user_category_stats")
    assert "ck_question_stats_count_non_negative" in _check_names("question_stats")
    assert "ck_feedback_text_length" in _check_names("feedback")
    assert {"idx_answer_records_user_answered", "idx_answer_records_score"} <= _index_names("answer_records")
