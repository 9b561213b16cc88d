# =============================================================================
# app/routers/profile.py - Profile Endpoints
# =============================================================================
# Read and update the signed-in user's own profile.
# All endpoints require an active session.
# =============================================================================

from fastapi import APIRouter

from app.auth import SessionControllerDep, require_user
from app.exceptions import ProfileNotFoundError
from core.models import Profile, ProfileUpdate

router = APIRouter()


@router.get("", response_model=Profile)
async def get_profile(controller: SessionControllerDep) -> Profile:
    """
    Get the signed-in user's profile as currently held in memory.

    Raises:
        401: Not signed in
        404: Signed in but no profile yet
    """
    user = require_user(controller, "get_profile")
    profile = controller.current_profile
    if profile is None:
        raise ProfileNotFoundError(user.id)
    return profile


@router.patch("", response_model=Profile)
async def update_profile(changes: ProfileUpdate, controller: SessionControllerDep) -> Profile:
    """
    Update fields of the signed-in user's profile.

    Only name, bio, user_type, avatar_url, tags and certificatePreference
    are accepted. The server's stored row is returned.

    Raises:
        401: Not signed in
        502: Update rejected
    """
    return await controller.update_profile(changes)


@router.post("/refresh", response_model=Profile)
async def refresh_profile(controller: SessionControllerDep) -> Profile:
    """
    Re-read the profile from the database.

    Raises:
        401: Not signed in
        404: Profile row missing
    """
    return await controller.refresh_profile()
