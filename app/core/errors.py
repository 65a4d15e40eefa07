"""Error taxonomy shared by the access-control core, the services and the API.

Every error carries the HTTP status it maps to; ``main.py`` renders them as
``{"detail": ...}`` exactly like FastAPI renders ``HTTPException``.
"""


class AppError(Exception):
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(AppError):
    """No valid session for the request."""
    status_code = 401
    default_detail = "Not authenticated"


class Unauthorized(AppError):
    """Authenticated, but the caller's role does not allow the action."""
    status_code = 403
    default_detail = "Not enough permissions"


class NotFound(AppError):
    status_code = 404
    default_detail = "Not found"


class UserNotFound(NotFound):
    default_detail = "User does not exist. They must register before you can invite them."


class Conflict(AppError):
    """Uniqueness violation in the store."""
    status_code = 409
    default_detail = "Conflict"


class AlreadyMember(Conflict):
    default_detail = "User is already a member of this workspace"


class DuplicateShare(Conflict):
    default_detail = "Note is already shared with this user"


class ValidationError(AppError):
    status_code = 422
    default_detail = "Invalid input"


class StoreUnavailable(AppError):
    status_code = 503
    default_detail = "Data store unavailable"
