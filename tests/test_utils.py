# =============================================================================
# tests/test_utils.py - Utility Function Tests
# =============================================================================

from uuid import UUID

from lib.utils import normalize_email, normalize_uuid, parse_auth_callback


class TestNormalization:
    """Tests for identifier and email normalization."""

    def test_uuid_object_becomes_string(self):
        value = UUID("550e8400-e29b-41d4-a716-446655440000")

        assert normalize_uuid(value) == "550e8400-e29b-41d4-a716-446655440000"

    def test_string_passes_through(self):
        assert normalize_uuid("u1") == "u1"

    def test_email_is_trimmed_and_lowercased(self):
        assert normalize_email("  Ann@Example.COM ") == "ann@example.com"


class TestParseAuthCallback:
    """Tests for parse_auth_callback()."""

    def test_implicit_flow_tokens_in_fragment(self):
        params = parse_auth_callback(
            "https://artfolio.test/set-password#access_token=at&expires_in=3600"
            "&refresh_token=rt&token_type=bearer&type=magiclink"
        )

        assert params.has_tokens
        assert params.access_token == "at"
        assert params.refresh_token == "rt"
        assert not params.has_code

    def test_pkce_code_in_query(self):
        params = parse_auth_callback("https://artfolio.test/auth/callback?code=abc-123")

        assert params.has_code
        assert params.auth_code == "abc-123"
        assert not params.has_tokens

    def test_fragment_tokens_take_precedence(self):
        params = parse_auth_callback("https://artfolio.test/cb?code=abc#access_token=at&refresh_token=rt")

        assert params.has_tokens
        assert params.auth_code is None

    def test_access_token_alone_is_not_enough(self):
        params = parse_auth_callback("https://artfolio.test/set-password#access_token=at")

        assert not params.has_tokens
        assert not params.has_code

    def test_error_description_decoded(self):
        params = parse_auth_callback(
            "https://artfolio.test/set-password#error=access_denied"
            "&error_code=otp_expired&error_description=Email+link+is+invalid+or+has+expired"
        )

        assert params.error_description == "Email link is invalid or has expired"

    def test_error_in_query(self):
        params = parse_auth_callback("https://artfolio.test/cb?error_description=denied")

        assert params.error_description == "denied"

    def test_plain_url(self):
        params = parse_auth_callback("https://artfolio.test/set-password")

        assert params.error_description is None
        assert not params.has_tokens
        assert not params.has_code
