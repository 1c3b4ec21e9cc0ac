# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication API routes."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from smartnote_server.api.schemas import (
    ForgetPasswordRequest,
    LoginResponse,
    MessageResponse,
    ProfilePictureResponse,
    ResetPasswordRequest,
    UserCreate,
    UserLogin,
    UserResponse,
)
from smartnote_server.dependencies import get_auth_service, get_current_user
from smartnote_server.errors import (
    EmailDeliveryFailed,
    InvalidOrExpiredOtp,
    ResetAlreadyPending,
    UserNotFound,
)
from smartnote_server.models import User
from smartnote_server.rate_limit import rate_limit_auth_dep
from smartnote_server.services.authentication import AuthService
from smartnote_server.services.uploads import (
    UploadRejected,
    delete_old_profile_picture,
    save_profile_picture,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FORGET_PASSWORD_MESSAGE = "If an account exists, an OTP has been sent to its email address."


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_auth_dep)],
)
async def register(
    data: UserCreate,
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create a new user account."""
    user = await service.register(data.email, data.password)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(rate_limit_auth_dep)])
async def login(
    data: UserLogin,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Authenticate and return a signed bearer token."""
    user, issued = await service.login(data.email, data.password)
    return LoginResponse(
        access_token=issued.token,
        expires_at=issued.expires_at,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    """Get current user profile."""
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke the presented token; it stops working immediately."""
    await service.logout(request.headers.get("Authorization"))
    return MessageResponse(message="Logout successful")


@router.patch("/upload-profile-pic", response_model=ProfilePictureResponse)
async def upload_profile_pic(
    profile_picture: UploadFile = File(...),
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ProfilePictureResponse:
    """Replace the current user's profile picture."""
    try:
        file_path = await save_profile_picture(profile_picture, user.id)
    except UploadRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    previous = user.profile_picture
    await service.update_profile_picture(user, file_path)
    if previous and previous != file_path:
        delete_old_profile_picture(previous)
    return ProfilePictureResponse(file_path=file_path)


@router.post(
    "/forget-password",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit_auth_dep)],
)
async def forget_password(
    data: ForgetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Request a password reset code by email.

    Every outcome gets the same response, so the endpoint cannot be used to
    probe which emails have accounts. Pending and delivery failures are logged.
    """
    try:
        await service.request_password_reset(data.email)
    except UserNotFound:
        logger.info("Password reset requested for unknown email")
    except ResetAlreadyPending as e:
        logger.info("Password reset requested while a code is pending (%d min left)", e.remaining_minutes)
    except EmailDeliveryFailed as e:
        logger.error("Password reset code not delivered: %s", e.message)
    return MessageResponse(message=FORGET_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit_auth_dep)],
)
async def reset_password(
    data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Reset password with the code from email."""
    try:
        await service.complete_password_reset(data.email, data.otp, data.new_password)
    except UserNotFound as e:
        raise InvalidOrExpiredOtp() from e
    return MessageResponse(message="Password reset successfully")
