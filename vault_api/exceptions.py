"""Custom exception hierarchy for the storage vault service."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Folder errors
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"

    # File errors
    FILE_NOT_FOUND = "FILE_NOT_FOUND"

    # Quota errors
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Persistence errors
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"


class VaultException(Exception):
    """
    Base exception for all vault errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(VaultException):
    """Validation failed for user input (empty name, negative size)."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class FolderNotFoundError(VaultException):
    """Folder does not exist or belongs to another vault."""

    def __init__(self, folder_id: int):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class VaultFileNotFoundError(VaultException):
    """File does not exist or its folder belongs to another vault."""

    def __init__(self, file_id: int):
        super().__init__(
            f"File not found: {file_id}",
            ErrorCode.FILE_NOT_FOUND,
            status_code=404,
            details={"file_id": file_id}
        )


class AuthenticationError(VaultException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(VaultException):
    """The requested mutation is not allowed."""

    def __init__(self, message: str = "You do not have permission to perform this action",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
            details=details,
        )


class SystemFolderProtectedError(ForbiddenError):
    """Attempted rename or delete of the reserved system folder."""

    def __init__(self, folder_id: int, action: str):
        super().__init__(
            f"System folders cannot be {action}",
            details={"folder_id": folder_id, "action": action},
        )


class QuotaExceededError(VaultException):
    """Recording a file would push the vault over its storage limit."""

    def __init__(self, requested: int, remaining: int):
        super().__init__(
            f"Storage quota exceeded: {requested} bytes requested, {remaining} bytes remaining",
            ErrorCode.QUOTA_EXCEEDED,
            status_code=413,
            details={"requested": requested, "remaining": remaining}
        )


class StorageUnavailableError(VaultException):
    """Backing database operation failed; the transaction was rolled back."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.STORAGE_UNAVAILABLE,
            status_code=503,
            details=details
        )
