# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the Pydantic models to ensure:
# - Database rows parse into Profile (aliases, NULL columns)
# - ProfileUpdate only carries the fields the caller set
# - Profile events validate through the tagged union
# - Snapshots serialize to the JSON payload used by HTTP and WebSocket
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from datetime import datetime

import pytest
from pydantic import ValidationError

from core.models import (
    AccountCategory,
    AuthSession,
    AuthState,
    CertificatePreference,
    Profile,
    ProfileDeleted,
    ProfileUpdate,
    ProfileUpdated,
    SessionSnapshot,
    profile_event_adapter,
)


# =============================================================================
# Profile Tests
# =============================================================================

class TestProfile:
    """Tests for Profile model."""

    def test_from_db_row(self, ann_row):
        """Test parsing a full row as PostgREST returns it."""
        # Arrange: add server timestamps to the row
        row = {**ann_row, "created_at": "2024-04-01T09:30:00+00:00"}

        # Act
        profile = Profile.from_db_row(row)

        # Assert
        assert profile.id == "u1"
        assert profile.user_type == AccountCategory.ARTIST
        assert profile.certificate_preference == CertificatePreference.DIGITAL
        assert profile.tags == ["Painter"]
        assert isinstance(profile.created_at, datetime)

    def test_null_columns_fall_back_to_defaults(self):
        """NULL tags/password_set become [] and False."""
        profile = Profile.from_db_row({"id": "u2", "tags": None, "password_set": None})

        assert profile.tags == []
        assert profile.password_set is False

    def test_unknown_columns_ignored(self):
        profile = Profile.from_db_row({"id": "u2", "portfolio_theme": "dark"})

        assert profile.id == "u2"

    def test_invalid_category_rejected(self):
        with pytest.raises(ValidationError):
            Profile.from_db_row({"id": "u2", "user_type": "gallery"})

    def test_profile_is_immutable(self):
        profile = Profile(id="u1", name="Ann")

        with pytest.raises(ValidationError):
            profile.name = "Anna"

    def test_dump_uses_column_alias(self, ann_row):
        data = Profile.from_db_row(ann_row).model_dump(mode="json", by_alias=True)

        assert data["certificatePreference"] == "digital"
        assert "certificate_preference" not in data


# =============================================================================
# ProfileUpdate Tests
# =============================================================================

class TestProfileUpdate:
    """Tests for ProfileUpdate model."""

    def test_only_set_fields_are_written(self):
        update = ProfileUpdate(bio="Bronze now.")

        assert update.to_columns() == {"bio": "Bronze now."}

    def test_explicit_none_clears_a_field(self):
        update = ProfileUpdate(avatar_url=None)

        assert update.to_columns() == {"avatar_url": None}

    def test_alias_accepted_and_written(self):
        update = ProfileUpdate.model_validate({"certificatePreference": "physical"})

        assert update.to_columns() == {"certificatePreference": "physical"}

    def test_empty_update_rejected(self):
        with pytest.raises(ValidationError):
            ProfileUpdate()

    def test_controller_managed_fields_rejected(self):
        with pytest.raises(ValidationError):
            ProfileUpdate.model_validate({"id": "u2", "bio": "x"})

        with pytest.raises(ValidationError):
            ProfileUpdate.model_validate({"password_set": True})


# =============================================================================
# Event Tests
# =============================================================================

class TestProfileEvents:
    """Tests for the ProfileEvent tagged union."""

    def test_updated_from_dict(self):
        event = profile_event_adapter.validate_python(
            {"kind": "updated", "profile": {"id": "u1", "name": "Ann"}}
        )

        assert isinstance(event, ProfileUpdated)
        assert event.profile_id == "u1"

    def test_deleted_from_dict(self):
        event = profile_event_adapter.validate_python({"kind": "deleted", "profile_id": "u1"})

        assert isinstance(event, ProfileDeleted)
        assert event.profile_id == "u1"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            profile_event_adapter.validate_python({"kind": "truncated", "profile_id": "u1"})


# =============================================================================
# Session Tests
# =============================================================================

class TestSession:
    """Tests for AuthSession and SessionSnapshot."""

    def test_tokens_hidden_from_repr(self):
        session = AuthSession(user_id="u1", access_token="secret-token")

        assert "secret-token" not in repr(session)
        assert session.user.id == "u1"

    def test_empty_subject_rejected(self):
        with pytest.raises(ValidationError):
            AuthSession(user_id="")

    def test_default_snapshot_is_loading(self):
        snapshot = SessionSnapshot()

        assert snapshot.state == AuthState.INITIALIZING
        assert snapshot.is_loading is True
        assert snapshot.is_authenticated is False

    def test_payload(self, ann_row):
        snapshot = SessionSnapshot(
            state=AuthState.AUTHENTICATED,
            user=AuthSession(user_id="u1", email="a@x.com").user,
            profile=Profile.from_db_row(ann_row),
            is_loading=False,
        )

        payload = snapshot.to_payload()

        assert payload["state"] == "authenticated"
        assert payload["user"] == {"id": "u1", "email": "a@x.com"}
        assert payload["profile"]["certificatePreference"] == "digital"
        assert payload["profile_loaded"] is True
