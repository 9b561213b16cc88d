# =============================================================================
# core/models/profile.py - Profile Schemas
# =============================================================================
# These models describe the application-level user record stored in the
# `profiles` table (one row per auth user, sharing the auth user's id):
# - Profile: a full row as returned by the store
# - ProfileUpdate: the client-writable subset used for partial updates
# - AccountCategory / CertificatePreference: closed value sets
#
# A profile row exists once sign-up has been completed. A session can exist
# without one while the user is between the magic link and the password step.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AccountCategory(str, Enum):
    """
    Kind of account a profile belongs to.

    - artist: publishes artworks and catalogues
    - collector: browses catalogues and sends inquiries
    """
    ARTIST = "artist"
    COLLECTOR = "collector"


class CertificatePreference(str, Enum):
    """How an artist issues certificates of authenticity."""
    DIGITAL = "digital"
    PHYSICAL = "physical"


class Profile(BaseModel):
    """
    A row of the profiles table.

    Columns the service doesn't know about are ignored, so adding a column
    server-side never breaks parsing.

    Example:
        {
            "id": "8a1c...",
            "email": "ann@example.com",
            "name": "Ann",
            "bio": "Oil on linen, mostly harbours.",
            "user_type": "artist",
            "password_set": true,
            "tags": ["Painter"],
            "certificatePreference": "digital"
        }
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        use_enum_values=False,
    )

    # Same value as the auth user's id
    id: str = Field(
        ...,
        min_length=1,
        description="Profile id (shared primary key with the auth user)"
    )

    email: str | None = Field(
        default=None,
        description="Email address the account signed up with"
    )

    name: str | None = Field(
        default=None,
        description="Display name"
    )

    bio: str | None = Field(
        default=None,
        description="Biography text"
    )

    user_type: AccountCategory | None = Field(
        default=None,
        description="Account category chosen when completing sign-up"
    )

    # False until the passwordless-provisioned account sets a password
    password_set: bool = Field(
        default=False,
        description="Whether the account has a password"
    )

    avatar_url: str | None = Field(
        default=None,
        description="Public URL of the avatar image"
    )

    tags: list[str] = Field(
        default_factory=list,
        description="Discipline tags (e.g. 'Painter', 'Sculptor')"
    )

    certificate_preference: CertificatePreference | None = Field(
        default=None,
        alias="certificatePreference",
        description="Preferred certificate of authenticity format"
    )

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls_for_defaults(cls, data: Any) -> Any:
        # PostgREST sends NULL for empty array/bool columns
        if isinstance(data, dict):
            data = dict(data)
            if data.get("tags") is None:
                data.pop("tags", None)
            if data.get("password_set") is None:
                data.pop("password_set", None)
        return data

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "Profile":
        """Build a Profile from a PostgREST / realtime record."""
        return cls.model_validate(row)


class ProfileUpdate(BaseModel):
    """
    Partial update of the caller's own profile.

    Only presentation fields are writable here. `id` and `password_set` are
    managed by the session controller and rejected if supplied.

    Example:
        {"bio": "Now working in bronze.", "tags": ["Sculptor"]}
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = Field(default=None, max_length=120)
    bio: str | None = Field(default=None, max_length=5000)
    user_type: AccountCategory | None = None
    avatar_url: str | None = None
    tags: list[str] | None = None
    certificate_preference: CertificatePreference | None = Field(
        default=None,
        alias="certificatePreference",
    )

    @model_validator(mode="after")
    def _require_one_field(self) -> "ProfileUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one profile field must be supplied")
        return self

    def to_columns(self) -> dict[str, Any]:
        """
        Column/value mapping for the store, limited to the fields the caller set.

        Explicitly set None values are kept so a field can be cleared.
        """
        return self.model_dump(
            mode="json",
            by_alias=True,
            include=self.model_fields_set,
        )
