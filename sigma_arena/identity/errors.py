from sigma_arena.core.errors import (
    AuthRejectedError,
    ConflictError,
    NotFoundError,
    RetryableError,
    ValidationError,
)


class IdentityUnavailableError(RetryableError):
    code = "E_IDENTITY_UNAVAILABLE"


class InvalidUsernameError(ValidationError):
    code = "E_USERNAME_INVALID"


class UsernameTakenError(ConflictError):
    code = "E_USERNAME_TAKEN"


class EmailTakenError(ConflictError):
    code = "E_EMAIL_TAKEN"


class AccountAlreadyLinkedError(ConflictError):
    code = "E_ACCOUNT_ALREADY_LINKED"


class UsernameRequiredError(ValidationError):
    code = "E_USERNAME_REQUIRED"


class DeviceIdRequiredError(ValidationError):
    code = "E_DEVICE_ID_REQUIRED"


class InvalidCredentialsError(AuthRejectedError):
    code = "E_INVALID_CREDENTIALS"


class SignupRejectedError(ValidationError):
    code = "E_SIGNUP_REJECTED"


class UserNotFoundError(NotFoundError):
    code = "E_USER_NOT_FOUND"
