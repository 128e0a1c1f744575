from __future__ import annotations


class SigmaArenaError(Exception):
    code = "E_INTERNAL"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)


class ValidationError(SigmaArenaError):
    code = "E_VALIDATION"


class NotFoundError(SigmaArenaError):
    code = "E_NOT_FOUND"


class AuthRequiredError(SigmaArenaError):
    code = "E_AUTH_REQUIRED"


class AuthRejectedError(SigmaArenaError):
    code = "E_AUTH_REJECTED"


class ConflictError(SigmaArenaError):
    code = "E_CONFLICT"

    def __init__(self, message: str | None = None, *, suggestions: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.suggestions = suggestions


class RetryableError(SigmaArenaError):
    code = "E_RETRYABLE"


class MergeInconsistencyError(SigmaArenaError):
    code = "E_MERGE_INCONSISTENCY"


class NoQuestionsForDateError(SigmaArenaError):
    code = "E_NO_QUESTIONS_FOR_DATE"
