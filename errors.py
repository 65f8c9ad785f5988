class SurveyError(Exception):
    """Base class for user-facing survey errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownIdentity(SurveyError):
    """Roll number or username not found."""


class BadCredential(SurveyError):
    """Password (or admin username/password pair) does not match."""


class IncompleteSubmission(SurveyError):
    """A feedback form is missing required answers."""

    def __init__(self, message: str, section: str = None):
        super().__init__(message)
        self.section = section


class StoreUnavailable(SurveyError):
    """The backing database could not be read or written."""
