"""
Application error taxonomy.

Every business-rule failure is an HTTPException subclass so services can raise
it directly and FastAPI turns it into a response with a readable ``detail``.
"""
from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Entity id absent"""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Duplicate username/email/department name or duplicate vote"""

    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidStateError(HTTPException):
    """Operation not allowed in the entity's current state"""

    def __init__(self, detail: str = "Invalid state for this operation"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationFailedError(HTTPException):
    def __init__(self, detail: str = "Validation failed"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class AuthFailureError(HTTPException):
    """Bad credentials or an invalid/expired token"""

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
