# =============================================================================
# core/models/events.py - Profile Change Events
# =============================================================================
# Realtime change notifications for a single profile row, as a tagged union:
#
#   ProfileUpdated(profile)     row inserted or updated, carries the new row
#   ProfileDeleted(profile_id)  row removed
#
# The Supabase adapter builds these from raw realtime payloads; the session
# controller only ever sees this union.
# =============================================================================

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .profile import Profile


class ProfileEventKind(str, Enum):
    UPDATED = "updated"
    DELETED = "deleted"


class ProfileUpdated(BaseModel):
    """A profile row was written; `profile` is the server's latest value."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["updated"] = "updated"
    profile: Profile

    @property
    def profile_id(self) -> str:
        return self.profile.id


class ProfileDeleted(BaseModel):
    """A profile row was removed."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["deleted"] = "deleted"
    profile_id: str


ProfileEvent = Annotated[
    Union[ProfileUpdated, ProfileDeleted],
    Field(discriminator="kind"),
]

# Validates a dict like {"kind": "deleted", "profile_id": "u1"}
profile_event_adapter: TypeAdapter[ProfileEvent] = TypeAdapter(ProfileEvent)
