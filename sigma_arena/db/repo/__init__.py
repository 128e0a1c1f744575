from sigma_arena.db.repo.answer_records_repo import AnswerRecordsRepo
from sigma_arena.db.repo.daily_question_slots_repo import DailyQuestionSlotsRepo
from sigma_arena.db.repo.feedback_repo import FeedbackRepo
from sigma_arena.db.repo.game_sessions_repo import GameSessionsRepo
from sigma_arena.db.repo.question_stats_repo import QuestionStatsRepo
from sigma_arena.db.repo.questions_repo import QuestionsRepo
from sigma_arena.db.repo.session_answers_repo import SessionAnswersRepo
from sigma_arena.db.repo.user_category_stats_repo import UserCategoryStatsRepo
from sigma_arena.db.repo.users_repo import UsersRepo

__all__ = [
    "AnswerRecordsRepo",
    "DailyQuestionSlotsRepo",
    "FeedbackRepo",
    "GameSessionsRepo",
    "QuestionStatsRepo",
    "QuestionsRepo",
    "SessionAnswersRepo",
    "UserCategoryStatsRepo",
    "UsersRepo",
]
