"""
Domain errors raised by CoLearn services.
Each carries the HTTP status the API layer answers with; the message is
shown to the user as-is.
"""


class CoLearnError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CoLearnError):
    """Rejected user action (class full, duplicate email, ...)"""
    status_code = 400


class AuthError(CoLearnError):
    status_code = 401


class LockedError(CoLearnError):
    """Content gated behind earlier lessons or modules"""
    status_code = 403


class NotFoundError(CoLearnError):
    status_code = 404


class ConflictError(CoLearnError):
    """State does not allow the action right now (finished duel, request in flight)"""
    status_code = 409


class AIServiceError(CoLearnError):
    """The generative model call itself failed"""
    status_code = 502


class AIResponseFormatError(AIServiceError):
    """The model answered, but not with the JSON shape we asked for"""
