"""
Domain errors raised by services and route handlers.

Each error carries an ``error`` code and an HTTP status. The application
registers one exception handler that renders them as the standard
``ErrorResponse`` body: ``{"success": false, "error": ..., "message": ...}``.
"""

from fastapi import status


class CRMError(Exception):
    """Base class for every domain error."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "bad_request"
    default_message: str = "The request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticatedError(CRMError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "unauthenticated"
    default_message = "Not authenticated"


class InvalidRoleError(CRMError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "invalid_role"
    default_message = "User role is not allowed to perform this action"


class ForbiddenError(CRMError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "forbidden"
    default_message = "You do not have permission to perform this action"


class NotFoundError(CRMError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"
    default_message = "Resource not found"


class DuplicatePhoneError(CRMError):
    status_code = status.HTTP_409_CONFLICT
    error = "duplicate_phone"
    default_message = "A patient with this phone number already exists"


class DuplicateEmailError(CRMError):
    status_code = status.HTTP_409_CONFLICT
    error = "duplicate_email"
    default_message = "A user with this email already exists"


class DuplicateTransferError(CRMError):
    status_code = status.HTTP_409_CONFLICT
    error = "duplicate_transfer"
    default_message = "A pending transfer request already exists for this patient"


class InvalidTransferStateError(CRMError):
    status_code = status.HTTP_409_CONFLICT
    error = "invalid_transfer_state"
    default_message = "Transfer request is not pending"


class StorageError(CRMError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "storage_unavailable"
    default_message = "File storage is unavailable, please try again later"


class DuplicateFileError(CRMError):
    status_code = status.HTTP_409_CONFLICT
    error = "duplicate_file"
    default_message = "This file is already attached to a lead"
