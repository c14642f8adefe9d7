"""Error taxonomy shared by the quiz core and its collaborators."""


class QuizError(Exception):
    """Base class for all quiz errors."""


class ConfigurationError(QuizError):
    """The static chapter catalog is malformed."""


class AuthorizationDenied(QuizError):
    """The current identity is not allowed to use the admin surface."""


class TransportFailure(QuizError):
    """A call to a remote collaborator failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AnswerValidationError(QuizError):
    """Answers were submitted before every blank was filled."""


class LastAdminError(QuizError):
    """Deleting the admin would leave the directory empty."""


class ConfirmationRequired(QuizError):
    """A destructive action was attempted without user confirmation."""
