# app/core/exceptions.py

from fastapi import HTTPException, status

# Base Exception
class BaseAPIException(HTTPException):
    """Base class for all custom API exceptions."""
    error = "error"

    def __init__(self, status_code: int, detail: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


# Input Exceptions
class ValidationError(BaseAPIException):
    """Exception raised for missing or malformed input."""
    error = "validation_error"

    def __init__(self, detail="Input data validation failed"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class ConflictError(BaseAPIException):
    """Exception raised when a nickname is already held by another user."""
    error = "conflict"

    def __init__(self, detail="Nickname already taken"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# Lookup & Access Exceptions
class NotFoundError(BaseAPIException):
    """Exception raised when a user, chat or message does not exist."""
    error = "not_found"

    def __init__(self, detail="Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class ForbiddenError(BaseAPIException):
    """Exception raised when the sender is not a participant of the chat."""
    error = "forbidden"

    def __init__(self, detail="Sender is not a participant of this chat"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


# Storage Exceptions
class PersistenceError(BaseAPIException):
    """
    Exception raised when the snapshot store cannot be read or written.
    Caught and logged by the persistence manager; never returned to a client.
    """
    error = "persistence_error"

    def __init__(self, detail="Snapshot store unavailable"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
