"""User profile and password endpoints."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from snippet_manager.api.v1.dependencies import (
    get_auth_service,
    get_current_user,
    get_profile_service,
    get_user_service,
)
from snippet_manager.services.auth_service import AuthService
from snippet_manager.services.profile_service import ProfileService
from snippet_manager.services.user_service import UserService
from snippet_manager.services.exceptions import (
    DeliveryError,
    InvalidInputError,
    UserNotFoundError,
)
from snippet_manager.schemas.user import (
    EmailRequest,
    MessageResponse,
    PasswordChangeRequest,
    PasswordResetRequest,
    UserResponse,
    UserUpdate,
)
from snippet_manager.models.user import User

router = APIRouter()


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get profile",
)
def get_profile(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get the current user's profile."""
    return current_user


@router.put(
    "/profile",
    response_model=UserResponse,
    summary="Update profile",
    description="Update name fields and/or point the profile image at an external URL.",
)
def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Update the current user's profile."""
    return user_service.update_profile(current_user, data)


@router.post(
    "/profile/image",
    response_model=UserResponse,
    summary="Upload profile image",
    description="Upload a JPEG, PNG, GIF or WebP image (max 5MB) as the profile image.",
)
async def upload_profile_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> User:
    """Upload a profile image."""
    content = await file.read()

    try:
        return profile_service.upload_profile_image(
            current_user, content, file.content_type or ""
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except DeliveryError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.delete(
    "/profile/image",
    response_model=UserResponse,
    summary="Remove profile image",
)
def remove_profile_image(
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> User:
    """Remove the profile image."""
    return profile_service.remove_profile_image(current_user)


@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
)
def change_password(
    data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Change the current user's password."""
    try:
        user_service.change_password(current_user, data.old_password, data.new_password)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return MessageResponse(message="Password changed successfully")


@router.post(
    "/reset-password-request",
    response_model=MessageResponse,
    summary="Request password reset",
    description="Email a password reset link valid for one hour.",
)
def request_password_reset(
    data: EmailRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Request a password reset link."""
    try:
        auth_service.request_password_reset(data.email)
    except UserNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except DeliveryError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    return MessageResponse(message="Password reset link sent to your email")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset password",
)
def reset_password(
    data: PasswordResetRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Set a new password with a reset token."""
    try:
        auth_service.reset_password(data.token, data.password)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return MessageResponse(message="Password reset successful")
