"""
Blob Provisioning Exception Hierarchy

Validation failures are raised before any storage call is attempted; backend
failures wrap errors reported by Azure Storage.

Author: azblob-plugin contributors
Date: 2026
"""

from typing import Any, Dict, Optional


class ProvisioningError(Exception):
    """
    Base exception for all provisioning errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., 'MissingOrInvalidTtl')
        details: Additional context (container name, operation, etc.)
    """

    error_code: str = "ProvisioningError"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format for API responses."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# ========== Validation Errors ==========

class ValidationFailure(ProvisioningError):
    """Base class for errors in the caller's request."""
    error_code = "ValidationFailure"


class MissingOrInvalidTtl(ValidationFailure):
    """Raised when the TTL query parameter is absent or not a positive number."""
    error_code = "MissingOrInvalidTtl"

    def __init__(self, raw_value: Optional[str] = None, reason: str = "missing"):
        super().__init__(
            "TTL is required.",
            details={"ttl": raw_value, "reason": reason}
        )


# ========== Backend Errors ==========

class BackendFailure(ProvisioningError):
    """Raised when Azure Storage rejects or fails an operation."""
    error_code = "BackendFailure"

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: Optional[int] = None,
        message: Optional[str] = None
    ):
        message = message or f"Storage operation '{operation}' failed: {reason}"
        details: Dict[str, Any] = {"operation": operation, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.operation = operation
        self.status_code = status_code


class TransientBackendFailure(BackendFailure):
    """Raised when Azure Storage stays unavailable after all retries."""
    error_code = "BackendUnavailable"
