"""
Error taxonomy for the platform.

Services raise these; app.main maps them to HTTP responses of the form
{"success": false, "error": "..."}.

    ValidationError      400  malformed or missing input
    NotFoundError        404  entity missing or not owned by the caller
    ConflictError        400  invariant violation (duplicates, exclusivity)
    AuthenticationError  401  bad credentials or token
    UnauthorizedError    403  acting on another actor's resource
    DependencyError      ---  side-effect collaborator failed (logged, swallowed)
    InternalError        500  anything else
"""


class PlatformError(Exception):
    """Base class for all errors surfaced by the platform."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(PlatformError):
    status_code = 400


class NotFoundError(PlatformError):
    status_code = 404


class ConflictError(PlatformError):
    status_code = 400


class AuthenticationError(PlatformError):
    status_code = 401


class UnauthorizedError(PlatformError):
    status_code = 403


class DependencyError(PlatformError):
    """A non-critical collaborator (notifications, email) failed."""
    status_code = 502


class InternalError(PlatformError):
    status_code = 500
