# =============================================================================
# core/services/reconciliation.py - Realtime Profile Reconciliation
# =============================================================================
# Decides what a realtime profile event means for the local state. Kept as a
# pure function so it can be tested without a controller or a network.
#
#   ProfileUpdated for the active user -> REPLACE (last writer wins)
#   ProfileDeleted for the active user -> INVALIDATE (sign the user out)
#   anything for another id / no user  -> IGNORE
# =============================================================================

from dataclasses import dataclass
from enum import Enum

from core.models import Profile, ProfileDeleted, ProfileEvent, ProfileUpdated


class ReconcileAction(str, Enum):
    IGNORE = "ignore"
    REPLACE = "replace"
    INVALIDATE = "invalidate"


@dataclass(frozen=True)
class ReconcileResult:
    action: ReconcileAction
    profile: Profile | None = None


def reconcile(
    active_user_id: str | None,
    current_profile: Profile | None,
    event: ProfileEvent,
) -> ReconcileResult:
    """
    Fold one change event into the current profile.

    Args:
        active_user_id: Subject id of the current session (None when signed out)
        current_profile: Profile currently held in memory
        event: Event delivered by the profile subscription

    Returns:
        ReconcileResult with the action to take and, for REPLACE, the new profile.
        For IGNORE the current profile is echoed back unchanged.
    """
    if active_user_id is None or event.profile_id != active_user_id:
        return ReconcileResult(ReconcileAction.IGNORE, current_profile)

    if isinstance(event, ProfileUpdated):
        return ReconcileResult(ReconcileAction.REPLACE, event.profile)

    if isinstance(event, ProfileDeleted):
        return ReconcileResult(ReconcileAction.INVALIDATE, None)

    return ReconcileResult(ReconcileAction.IGNORE, current_profile)
