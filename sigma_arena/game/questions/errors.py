from sigma_arena.core.errors import NotFoundError, ValidationError


class QuestionNotFoundError(NotFoundError):
    code = "E_QUESTION_NOT_FOUND"


class NotEnoughQuestionsError(ValidationError):
    code = "E_NOT_ENOUGH_QUESTIONS"
