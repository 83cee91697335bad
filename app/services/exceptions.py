"""
Scheduling errors.

Every error carries a machine-readable `kind` and a human `message`; routers
turn them into HTTPException with the matching status code.
"""


class SchedulingError(Exception):
    status_code = 400
    default_kind = "SCHEDULING_ERROR"

    def __init__(self, message: str, kind: str = None):
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind

    def to_detail(self) -> dict:
        return {"error": self.kind, "message": self.message}


class SchedulingValidationError(SchedulingError):
    status_code = 400
    default_kind = "INVALID_UPDATE"


class NotAvailableError(SchedulingError):
    status_code = 400
    default_kind = "NOT_AVAILABLE"


class SchedulingConflictError(SchedulingError):
    status_code = 409
    default_kind = "SCHEDULING_CONFLICT"

    def __init__(self, message: str, conflict=None):
        super().__init__(message)
        self.conflict = conflict


class DuplicateRequestError(SchedulingError):
    status_code = 409
    default_kind = "DUPLICATE_REQUEST"


class PermissionDeniedError(SchedulingError):
    status_code = 403
    default_kind = "UNAUTHORIZED"


class NotFoundError(SchedulingError):
    status_code = 404
    default_kind = "NOT_FOUND"
