"""Error taxonomy for meal estimation."""

SERVICE_UNAVAILABLE = "service-unavailable"
MALFORMED_OUTPUT = "malformed-output"


class CalorieLoggerError(Exception):
    """Base class for application errors."""


class InputError(CalorieLoggerError):
    """Raised when a request is malformed and the user can correct it."""


class MealNotFoundError(CalorieLoggerError):
    """Raised when an edit targets a meal that is not in the log."""


class EstimatorError(CalorieLoggerError):
    """Raised when a language-model call fails or returns unusable output."""

    def __init__(self, reason: str, raw: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw

    @property
    def is_malformed(self) -> bool:
        """Return true when the service answered with unparseable output."""
        return self.reason == MALFORMED_OUTPUT


class InternalFailure(CalorieLoggerError):
    """Raised when orchestration fails in a way that cannot be recovered."""
