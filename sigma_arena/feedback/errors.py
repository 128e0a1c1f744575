from sigma_arena.core.errors import ValidationError


class FeedbackTextInvalidError(ValidationError):
    code = "E_FEEDBACK_TEXT_INVALID"
