"""Authentication endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from snippet_manager.api.v1.dependencies import (
    get_auth_service,
    get_current_user,
    get_user_service,
)
from snippet_manager.services.auth_service import AuthService
from snippet_manager.services.user_service import UserService
from snippet_manager.services.exceptions import (
    AuthenticationError,
    DeliveryError,
    EmailNotVerifiedError,
    InvalidInputError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from snippet_manager.schemas.user import (
    AuthResponse,
    EmailRequest,
    GoogleAuthRequest,
    LoginRequest,
    MessageResponse,
    OTPVerifyRequest,
    SignupResponse,
    UserCreate,
    UserResponse,
)
from snippet_manager.models.user import User

router = APIRouter()


def _auth_response(user: User, user_service: UserService) -> AuthResponse:
    return AuthResponse(
        access_token=user_service.create_access_token(user.id),
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="""
    Create an account and email a verification code.

    Signing up again with an email that is still unverified replaces the
    pending details and sends a new code (200 instead of 201).
    """,
)
def signup(
    data: UserCreate,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> SignupResponse:
    """Register a new user."""
    try:
        user, created = auth_service.signup(data)
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except DeliveryError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    if not created:
        response.status_code = status.HTTP_200_OK

    return SignupResponse(message="Verification code sent to your email", email=user.email)


@router.post(
    "/verify-otp",
    response_model=AuthResponse,
    summary="Verify email",
    description="Submit the emailed verification code to activate the account and log in.",
)
def verify_otp(
    data: OTPVerifyRequest,
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Verify an email address."""
    try:
        user = auth_service.verify_otp(data.email, data.otp)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return _auth_response(user, user_service)


@router.post(
    "/resend-otp",
    response_model=MessageResponse,
    summary="Resend verification code",
)
def resend_otp(
    data: EmailRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Send a fresh verification code."""
    try:
        auth_service.resend_otp(data.email)
    except UserNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except DeliveryError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    return MessageResponse(message="Verification code sent to your email")


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login to get access token",
    description="Authenticate with email and password to receive a JWT access token.",
)
def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Login and get access token."""
    try:
        user = auth_service.login(data.email, data.password)
    except EmailNotVerifiedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": e.message,
                "requires_verification": True,
                "email": e.email,
            },
        )
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _auth_response(user, user_service)


@router.post(
    "/google",
    response_model=AuthResponse,
    summary="Sign in with Google",
    description="Exchange a Google ID token for an access token, creating the account if needed.",
)
def google_auth(
    data: GoogleAuthRequest,
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Google sign-in."""
    try:
        user = auth_service.google_login(data.token)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except DeliveryError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    return _auth_response(user, user_service)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get the currently authenticated user's information.",
)
def get_me(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get current user information."""
    return current_user
