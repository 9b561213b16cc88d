# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic request/response bodies for the auth endpoints.
# =============================================================================

from pydantic import BaseModel, Field

from core.models import AccountCategory

# Deliberately loose; the auth provider does the real validation
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignUpRequest(BaseModel):
    """Start sign-up by emailing a magic link."""
    email: str = Field(..., pattern=EMAIL_PATTERN, examples=["ann@example.com"])


class SignUpResponse(BaseModel):
    email: str
    redirect_to: str
    message_id: str | None = None
    message: str = Field(default="Check your email for a sign-up link")


class CompleteSignUpRequest(BaseModel):
    """
    Finish sign-up after following the magic link.

    Example:
        {
            "email": "ann@example.com",
            "password": "correct horse battery staple",
            "account_category": "artist",
            "bio": "Oil on linen.",
            "name": "Ann"
        }
    """
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, repr=False)
    account_category: AccountCategory
    bio: str | None = Field(default=None, max_length=5000)
    name: str | None = Field(default=None, max_length=120)


class SignInRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, repr=False)


class VerifyOtpRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    token: str = Field(..., min_length=4, max_length=12)


class AuthCallbackRequest(BaseModel):
    """Full callback URL the magic link redirected to, including its fragment."""
    url: str = Field(..., min_length=1)


class GuardResponse(BaseModel):
    decision: str
    redirect_to: str | None = None
