# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints that drive the session controller: sign-up (magic link then
# password), sign-in, sign-out, link callbacks and the current state.
#
# Errors are raised as ArtFolioException subclasses and rendered by the
# handler registered in app/main.py.
# =============================================================================

import logging

from fastapi import APIRouter

from app.auth.dependencies import SessionControllerDep
from app.auth.models import (
    AuthCallbackRequest,
    CompleteSignUpRequest,
    GuardResponse,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    VerifyOtpRequest,
)
from core.models import Profile
from core.services import REDIRECT_PATHS, evaluate_access

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/state")
async def get_session_state(controller: SessionControllerDep) -> dict:
    """
    Get the current session snapshot.

    Returns:
        dict: state, user, profile, is_loading, profile_loaded
    """
    return controller.snapshot.to_payload()


@router.get("/guard", response_model=GuardResponse)
async def get_route_guard(controller: SessionControllerDep) -> GuardResponse:
    """
    Decide whether a protected page may render.

    Returns one of: wait, login, set_password, allow.
    """
    decision = evaluate_access(controller.snapshot)
    return GuardResponse(decision=decision.value, redirect_to=REDIRECT_PATHS[decision])


@router.post("/signup", response_model=SignUpResponse, status_code=202)
async def sign_up(request: SignUpRequest, controller: SessionControllerDep) -> SignUpResponse:
    """
    Email a sign-up magic link.

    Raises:
        409: An account already exists for this email
        502: The link could not be sent
    """
    confirmation = await controller.sign_up(request.email)
    return SignUpResponse(**confirmation.model_dump())


@router.post("/signup/complete", response_model=Profile, response_model_by_alias=True)
async def complete_sign_up(
    request: CompleteSignUpRequest,
    controller: SessionControllerDep,
) -> Profile:
    """
    Set the password and create the profile after the magic link.

    Raises:
        422: Password rejected by policy
        502: Profile could not be saved
    """
    return await controller.complete_sign_up(
        email=request.email,
        password=request.password,
        account_category=request.account_category,
        biography=request.bio,
        name=request.name,
    )


@router.post("/otp/verify")
async def verify_otp(request: VerifyOtpRequest, controller: SessionControllerDep) -> dict:
    """
    Sign in with the one-time code from the sign-up email.

    Raises:
        401: Wrong or expired code
    """
    snapshot = await controller.verify_otp(request.email, request.token)
    return snapshot.to_payload()


@router.post("/callback")
async def complete_link_sign_in(
    request: AuthCallbackRequest,
    controller: SessionControllerDep,
) -> dict:
    """
    Consume the URL a magic link redirected to.

    Raises:
        502: Link rejected or carrying no credentials
    """
    snapshot = await controller.complete_link_sign_in(request.url)
    return snapshot.to_payload()


@router.post("/signin")
async def sign_in(request: SignInRequest, controller: SessionControllerDep) -> dict:
    """
    Sign in with email and password.

    Raises:
        401: Invalid credentials
        404: Signed in but the profile is missing (finish sign-up)
    """
    snapshot = await controller.sign_in(request.email, request.password)
    return snapshot.to_payload()


@router.post("/signout")
async def sign_out(controller: SessionControllerDep) -> dict:
    """
    Sign out. Local state is cleared even if the remote call fails (502).
    """
    snapshot = await controller.sign_out()
    return snapshot.to_payload()
