from sigma_arena.db.models.answer_records import AnswerRecord
from sigma_arena.db.models.daily_question_slots import DailyQuestionSlot
from sigma_arena.db.models.feedback import Feedback
from sigma_arena.db.models.game_sessions import GameSession
from sigma_arena.db.models.question_stats import QuestionStat
from sigma_arena.db.models.questions import Question
from sigma_arena.db.models.session_answers import SessionAnswer
from sigma_arena.db.models.user_category_stats import UserCategoryStat
from sigma_arena.db.models.users import User

__all__ = [
    "AnswerRecord",
    "DailyQuestionSlot",
    "Feedback",
    "GameSession",
    "QuestionStat",
    "Question",
    "SessionAnswer",
    "UserCategoryStat",
    "User",
]
