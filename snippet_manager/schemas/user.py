"""Pydantic schemas for user and authentication."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, EmailStr, ConfigDict


class UserCreate(BaseModel):
    """Schema for signing up a new user."""

    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, max_length=72, description="User password")


class LoginRequest(BaseModel):
    """Schema for password login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class OTPVerifyRequest(BaseModel):
    """Schema for submitting an email verification code."""

    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=12)


class EmailRequest(BaseModel):
    """Schema for requests carrying only an email address."""

    email: EmailStr


class GoogleAuthRequest(BaseModel):
    """Schema for Google sign-in."""

    token: str = Field(..., min_length=1, description="Google ID token")


class UserUpdate(BaseModel):
    """Schema for profile updates. All fields optional."""

    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    profile_image_url: Optional[str] = Field(default=None, max_length=2048)


class PasswordChangeRequest(BaseModel):
    """Schema for changing the password of the current user."""

    old_password: str = Field(..., min_length=1, max_length=72)
    new_password: str = Field(..., min_length=8, max_length=72)


class PasswordResetRequest(BaseModel):
    """Schema for completing a password reset."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=72)


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Unique user identifier")
    email: str = Field(..., description="User email address")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    full_name: str = Field(..., description="First and last name")
    profile_image_url: Optional[str] = Field(default=None, description="Profile image URL")
    email_verified: bool = Field(..., description="Whether the email is verified")
    created_at: datetime = Field(..., description="Account creation timestamp")


class Token(BaseModel):
    """Schema for authentication token response."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class AuthResponse(Token):
    """Token together with the authenticated user."""

    user: UserResponse


class SignupResponse(BaseModel):
    """Schema returned once a verification code has been sent."""

    message: str
    email: str


class MessageResponse(BaseModel):
    """Schema for plain acknowledgement responses."""

    message: str


class TokenPayload(BaseModel):
    """Schema for JWT token payload."""

    sub: Optional[str] = Field(default=None, description="Subject (user ID)")
    exp: Optional[int] = Field(default=None, description="Expiration timestamp")
