"""
Error kinds raised by the task rewards backend.
Each error carries the HTTP status code handlers respond with.
"""


class TaskboardError(Exception):
    """Base class for every expected, request-scoped failure."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransition(TaskboardError):
    """Wrong source status for the requested edge, or wrong caller role."""
    status_code = 409


class InvalidInput(TaskboardError):
    """Malformed or missing field, e.g. a negative reward."""
    status_code = 400


class NotFound(TaskboardError):
    """Task, user or submission id absent (or outside the caller's scope)."""
    status_code = 404


class StoreUnavailable(TaskboardError):
    """Transient failure talking to DynamoDB."""
    status_code = 503


class Unauthenticated(TaskboardError):
    """No caller identity on the request."""
    status_code = 401


class Forbidden(TaskboardError):
    """Endpoint reserved for another role."""
    status_code = 403
