"""Custom exception classes for the application."""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class ConflictError(HTTPException):
    def __init__(self, detail: str = "Another operation is already in progress"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class ValidationError(HTTPException):
    """Rejected locally, before any request reaches the backend."""

    def __init__(self, detail: str = "Validation error"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class BackendError(HTTPException):
    """The bookkeeping backend failed or could not be reached."""

    def __init__(self, detail: str = "An error occurred", upstream_status: int | None = None):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
        )
        self.upstream_status = upstream_status


class ReconnectRequiredError(HTTPException):
    """The stored QuickBooks OAuth token expired; the user must reconnect."""

    def __init__(self, detail: str = "Reconnect to QuickBooks and try again."):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )
