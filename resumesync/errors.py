"""
Domain errors raised by services. main.py maps each one to an HTTP status
and a `{"detail": {"code", "message"}}` body.
"""


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"


class NotFound(AppError):
    status_code = 404
    code = "not_found"


class PreconditionFailed(AppError):
    status_code = 412
    code = "precondition_failed"


class ValidationFailure(AppError):
    status_code = 422
    code = "validation_failed"


class UpstreamFailure(AppError):
    """Non-success status, bad body or transport error from GitHub, the summarizer, the export service or S3."""
    status_code = 502
    code = "upstream_error"
