"""Pydantic schemas for bulk account export and import."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, EmailStr, Field, field_validator

from gameaccounts.schemas.account import (
    NAME_MAX_LENGTH,
    SCHOOL_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    AccountResponse,
    AccountStatsResponse,
    normalize_username,
)


class AccountExport(BaseModel):
    """Snapshot of every account at export time."""

    exported_at: datetime
    count: int
    accounts: List[AccountResponse] = Field(default_factory=list)


class StatsExport(BaseModel):
    exported_at: datetime
    stats: AccountStatsResponse


class AccountImportRecord(BaseModel):
    """One account to import.

    Records without a password receive the configured placeholder password.
    """

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LENGTH)
    email: EmailStr
    password: str | None = Field(
        default=None,
        description="Optional plaintext password; the placeholder is used when omitted.",
    )
    first_name: str = Field(default="", max_length=NAME_MAX_LENGTH)
    last_name: str = Field(default="", max_length=NAME_MAX_LENGTH)
    grade: int = Field(default=0, ge=0)
    school: str = Field(default="", max_length=SCHOOL_MAX_LENGTH)
    game_level: int = 1
    experience: int = Field(default=0, ge=0)
    is_active: bool = True

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        return normalize_username(value)


class AccountImportRequest(BaseModel):
    accounts: List[AccountImportRecord] = Field(default_factory=list)


class ImportFailure(BaseModel):
    """A record that could not be imported and the error code explaining why."""

    username: str
    code: str
    message: str


class ImportResult(BaseModel):
    imported: int = 0
    failed: List[ImportFailure] = Field(default_factory=list)
