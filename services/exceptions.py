"""
Session-layer errors. Each carries the HTTP status and error code the API
boundary responds with; messages are safe to show to clients.
"""


class SessionError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    default_message = "Something went wrong"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SessionValidationError(SessionError):
    status = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class UnauthorizedError(SessionError):
    status = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized request"


class NotFoundError(SessionError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(SessionError):
    status = 409
    code = "CONFLICT"
    default_message = "Conflict"


class UpstreamError(SessionError):
    status = 502
    code = "UPSTREAM_ERROR"
    default_message = "Media upload failed"


class InternalError(SessionError):
    pass
