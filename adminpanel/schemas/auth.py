"""Pydantic schemas for authentication API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request for login."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class RegisterRequest(BaseModel):
    """Request for self-registration."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=r"^[a-zA-Z][a-zA-Z0-9_]*$",
        description="Username (3-50 chars, alphanumeric and underscore, must start with letter)",
    )
    password: str = Field(..., min_length=8, max_length=128)
    nickname: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)


class TokenResponse(BaseModel):
    """Response with the access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token expiry in seconds")


class AccountResponse(BaseModel):
    """Public account information."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    nickname: str | None
    email: str | None
    status: int
    created_at: datetime


class LoginResponse(BaseModel):
    account: AccountResponse
    token: TokenResponse


class ChangePasswordRequest(BaseModel):
    """Request for password change."""

    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class PermissionsResponse(BaseModel):
    permissions: list[str]


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
