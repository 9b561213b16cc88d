# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Shared fixtures built on the fakes in tests/fakes.py
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SITE_URL", "https://artfolio.test")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from app.exceptions import ProfileFetchError
from core.services import SessionController
from tests.fakes import SIGNUP_REDIRECT, FakeAuthGateway, FakeProfileStore


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def auth():
    return FakeAuthGateway()


@pytest.fixture
def store():
    return FakeProfileStore()


@pytest.fixture
def controller(auth, store):
    return SessionController(auth, store, signup_redirect_url=SIGNUP_REDIRECT)


@pytest.fixture
def ann_row():
    """Profile row of a fully signed-up artist."""
    return {
        "id": "u1",
        "email": "a@x.com",
        "name": "Ann",
        "bio": "Oil on linen.",
        "user_type": "artist",
        "password_set": True,
        "tags": ["Painter"],
        "certificatePreference": "digital",
    }


@pytest.fixture
def fetch_failure():
    return ProfileFetchError("connection reset")
