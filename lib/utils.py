# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit
from uuid import UUID


# =============================================================================
# Identifier Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        user_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        user_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def normalize_email(email: str) -> str:
    """Lower-case and strip an email address so lookups match sign-up input."""
    return email.strip().lower()


# =============================================================================
# Magic Link Callbacks
# =============================================================================

@dataclass(frozen=True)
class AuthCallbackParams:
    """
    Credentials carried by a magic-link callback URL.

    Exactly one of the two shapes is populated:
    - implicit flow: access_token + refresh_token in the URL fragment
    - PKCE flow: code in the query string
    """
    access_token: str | None = None
    refresh_token: str | None = None
    auth_code: str | None = None
    error_description: str | None = None

    @property
    def has_tokens(self) -> bool:
        return bool(self.access_token and self.refresh_token)

    @property
    def has_code(self) -> bool:
        return bool(self.auth_code)


def parse_auth_callback(url: str) -> AuthCallbackParams:
    """
    Extract session credentials from a magic-link callback URL.

    Example:
        parse_auth_callback("https://app/set-password#access_token=a&refresh_token=r")
        -> AuthCallbackParams(access_token="a", refresh_token="r")

        parse_auth_callback("https://app/auth/callback?code=abc")
        -> AuthCallbackParams(auth_code="abc")
    """
    parts = urlsplit(url)
    fragment = parse_qs(parts.fragment)
    query = parse_qs(parts.query)

    def first(params: dict[str, list[str]], key: str) -> str | None:
        values = params.get(key)
        return values[0] if values else None

    error = first(fragment, "error_description") or first(query, "error_description")

    access_token = first(fragment, "access_token")
    refresh_token = first(fragment, "refresh_token")
    if access_token and refresh_token:
        return AuthCallbackParams(
            access_token=access_token,
            refresh_token=refresh_token,
            error_description=error,
        )

    return AuthCallbackParams(auth_code=first(query, "code"), error_description=error)
