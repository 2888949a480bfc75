"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

OtpCode = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\d{6}$")]


class SignupRequest(BaseModel):
    """Request model for starting a signup."""

    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr
    password: str = Field(..., min_length=6, description="User password (min 6 characters)")
    country: str = Field(..., min_length=1, max_length=100)
    contact: str = Field(..., min_length=1, description="Phone contact, e.g. +92...")


class SignupResponse(BaseModel):
    """Response model for an issued OTP."""

    message: str
    email: str
    expires_in_seconds: int


class ResendOtpRequest(BaseModel):
    """Request model for re-issuing an OTP."""

    email: EmailStr


class ResendOtpResponse(BaseModel):
    message: str
    email: str


class VerifyOtpRequest(BaseModel):
    """Request model for OTP verification."""

    email: EmailStr
    otp: OtpCode = Field(..., description="6-digit verification code")


class LoginRequest(BaseModel):
    """Request model for credential login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    """
    Request model for editing the signed-in user's profile.

    Unknown keys are kept so that attempts to change the email or
    password can be refused explicitly rather than silently dropped.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(None, min_length=1)
    country: str | None = Field(None, min_length=1, max_length=100)
    contact: str | None = Field(None, min_length=1)


class ChangePasswordRequest(BaseModel):
    """Request model for a password change."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, description="New password (min 6 characters)")


class MessageResponse(BaseModel):
    message: str


class UserProfile(BaseModel):
    """Public account fields (no credential hash, no lockout state)."""

    id: str
    name: str
    email: str
    country: str
    contact: str
    email_verified: bool
    last_login: datetime | None = None
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    """Response model for a successful verification or login."""

    message: str
    user: UserProfile
    token: str


class ProfileResponse(BaseModel):
    user: UserProfile


class UpdateProfileResponse(BaseModel):
    message: str
    user: UserProfile


class EmailAvailabilityResponse(BaseModel):
    email: str
    available: bool


class ErrorDetail(BaseModel):
    """Stable error category plus a human-readable message."""

    category: str
    message: str
    fields: dict[str, str] | None = None


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: ErrorDetail
