from sigma_arena.core.errors import ConflictError, NotFoundError, ValidationError


class SessionNotFoundError(NotFoundError):
    code = "E_SESSION_NOT_FOUND"


class UnknownQuestionError(ValidationError):
    code = "E_UNKNOWN_QUESTION"


class InvalidBoundsError(ValidationError):
    code = "E_INVALID_BOUNDS"


class AlreadyAnsweredError(ConflictError):
    code = "E_ALREADY_ANSWERED"


class SessionFinalizedError(ConflictError):
    code = "E_SESSION_FINALIZED"


class DailyAlreadyPlayedError(ConflictError):
    code = "E_DAILY_ALREADY_PLAYED"
