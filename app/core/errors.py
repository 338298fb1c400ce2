"""Business errors raised by the service layer.

Each error carries the HTTP status it maps to; ``app.main`` renders them as
``{"detail": ...}``. Anything that is not a ``ServiceError`` is treated as an
infrastructure fault and reported as a generic 500.
"""


class ServiceError(Exception):
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInput(ServiceError):
    status_code = 400
    default_detail = "Invalid input"


class Unauthorized(ServiceError):
    status_code = 401
    default_detail = "Not authorized"


class NotFoundOrForbidden(ServiceError):
    """Missing entity or one owned by another admin; callers cannot tell which."""

    status_code = 404
    default_detail = "Not found"


class Conflict(ServiceError):
    status_code = 409
    default_detail = "Resource already exists"


class SlotConflict(Conflict):
    default_detail = "This time slot is already booked for this provider."
