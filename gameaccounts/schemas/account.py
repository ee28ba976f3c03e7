"""Pydantic schemas for account requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_MAX_LENGTH = 64
NAME_MAX_LENGTH = 100
SCHOOL_MAX_LENGTH = 255


def normalize_username(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("username must not be blank")
    return value


class AccountCreate(BaseModel):
    """Payload for creating a student account."""

    username: str = Field(
        ...,
        min_length=1,
        max_length=USERNAME_MAX_LENGTH,
        description="Unique login name.",
    )
    email: EmailStr = Field(..., description="Unique email address.")
    password: str = Field(
        ...,
        description="Plaintext password; hashed before storage and never returned.",
    )
    first_name: str = Field(default="", max_length=NAME_MAX_LENGTH)
    last_name: str = Field(default="", max_length=NAME_MAX_LENGTH)
    grade: int = Field(default=0, ge=0, description="School grade; 0 means unset.")
    school: str = Field(default="", max_length=SCHOOL_MAX_LENGTH)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        return normalize_username(value)


class AccountUpdate(BaseModel):
    """Full replacement of the mutable account fields.

    There is no partial patch: callers resend current values for fields they
    do not want to change. Username, email and password cannot be changed here.
    """

    first_name: str = Field(..., max_length=NAME_MAX_LENGTH)
    last_name: str = Field(..., max_length=NAME_MAX_LENGTH)
    grade: int = Field(..., ge=0)
    school: str = Field(..., max_length=SCHOOL_MAX_LENGTH)
    game_level: int = Field(..., description="Current level in the game.")
    experience: int = Field(..., ge=0, description="Accumulated experience points.")
    is_active: bool


class AccountResponse(BaseModel):
    """Account as exposed to clients (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    grade: int
    school: str
    game_level: int
    experience: int
    created_at: datetime
    updated_at: datetime
    is_active: bool


class AccountStatsResponse(BaseModel):
    """Aggregate statistics over all stored accounts."""

    model_config = ConfigDict(from_attributes=True)

    total_accounts: int
    active_accounts: int
    average_game_level: float
    total_experience: int


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        return normalize_username(value)


class LoginResponse(BaseModel):
    message: str = "Login successful"
    account: AccountResponse


class MessageResponse(BaseModel):
    message: str
