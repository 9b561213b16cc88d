# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Closed error taxonomy for the session service plus the FastAPI handlers
# that render it. Provider-specific errors (Supabase auth, PostgREST,
# transport) are converted into these classes inside lib/supabase_client.py,
# so nothing past the adapters ever inspects a provider error shape.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ArtFolioException(Exception):
    """
    Base exception for the ArtFolio session service.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "ARTFOLIO_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# =============================================================================
# Sign-up / Sign-in Exceptions
# =============================================================================

class DuplicateAccountError(ArtFolioException):
    """Raised when sign-up is attempted for an email that already has a profile."""

    def __init__(self, email: str):
        super().__init__(
            message=f"An account already exists for {email}",
            code="DUPLICATE_ACCOUNT",
            status_code=409,
            suggestion="Log in with your password instead of signing up again",
            details={"email": email}
        )


class InvalidCredentialsError(ArtFolioException):
    """Raised when the auth provider rejects an email/password pair or a one-time code."""

    def __init__(self, reason: str = "Invalid login credentials"):
        super().__init__(
            message=reason,
            code="INVALID_CREDENTIALS",
            status_code=401,
            suggestion="Check the email address and password and try again",
        )


class CredentialError(ArtFolioException):
    """Raised when a new password is rejected by the provider's policy."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Password was rejected: {reason}",
            code="CREDENTIAL_REJECTED",
            status_code=422,
            suggestion="Choose a longer password that meets the project's password policy",
            details={"reason": reason}
        )


class NotAuthenticatedError(ArtFolioException):
    """Raised when an operation that needs a session is called without one."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Sign in before calling {operation}",
            code="NOT_AUTHENTICATED",
            status_code=401,
            details={"operation": operation}
        )


class AuthServiceError(ArtFolioException):
    """Raised on transport or provider-level failures of the auth service."""

    def __init__(
        self,
        message: str,
        code: str = "AUTH_SERVICE_ERROR",
        suggestion: str | None = "Try again later or check the Supabase project status",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=502,
            suggestion=suggestion,
            details=details,
        )


# =============================================================================
# Profile Exceptions
# =============================================================================

class ProfileNotFoundError(ArtFolioException):
    """
    Raised when a session exists but its profile row does not.

    Kept distinct from other failures so callers can route the user to
    account completion instead of showing a generic error.
    """

    def __init__(self, user_id: str):
        super().__init__(
            message=f"No profile found for user {user_id}",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Finish sign-up by setting a password and account type",
            details={"user_id": user_id}
        )


class ProfileFetchError(ArtFolioException):
    """Raised when reading from the profile table fails at the transport level."""

    def __init__(self, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Failed to read profile: {error}",
            code="PROFILE_FETCH_FAILED",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details=details,
        )


class ProfilePersistError(ArtFolioException):
    """Raised when a profile write is rejected. In-memory state is left unchanged."""

    def __init__(self, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Failed to save profile: {error}",
            code="PROFILE_PERSIST_FAILED",
            status_code=502,
            suggestion="Check the submitted fields and try again",
            details=details,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def artfolio_exception_handler(
    request: Request,
    exc: ArtFolioException
) -> JSONResponse:
    """
    Convert ArtFolioException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
