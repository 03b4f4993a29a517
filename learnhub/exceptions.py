"""
Domain errors raised by services and rendered by the API layer

Every error carries an HTTP status, a machine-readable reason code and a
human-readable message. Services raise these before mutating anything.
"""


class LearnHubError(Exception):
    """Base class for all rejections reported to the caller"""

    status_code = 400
    code = "error"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class Unauthorized(LearnHubError):
    status_code = 401
    code = "unauthorized"


class Forbidden(LearnHubError):
    status_code = 403
    code = "forbidden"


class NotFound(LearnHubError):
    status_code = 404
    code = "not_found"


class Conflict(LearnHubError):
    status_code = 409
    code = "conflict"

    def __init__(self, message: str, code: str = None, **extra):
        super().__init__(message, code)
        self.extra = extra

    def to_dict(self) -> dict:
        return {**super().to_dict(), **self.extra}


class InvalidState(LearnHubError):
    status_code = 400
    code = "invalid_state"


class ValidationError(LearnHubError):
    status_code = 400
    code = "validation_error"


class ServiceUnavailable(LearnHubError):
    status_code = 503
    code = "service_unavailable"


class UpstreamError(LearnHubError):
    status_code = 502
    code = "upstream_error"


# State-machine rejections of the quiz attempt lifecycle

class NotAQuiz(InvalidState):
    code = "not_a_quiz"


class NotEnrolled(Forbidden):
    code = "not_enrolled"


class RetryLimitReached(InvalidState):
    code = "retry_limit_reached"


class AlreadyCompleted(InvalidState):
    code = "already_completed"


class RateLimited(LearnHubError):
    status_code = 429
    code = "rate_limit_exceeded"

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        return {**super().to_dict(), "retry_after": self.retry_after}
