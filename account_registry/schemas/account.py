"""
Account Schemas

Pydantic models for account input validation and read views
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from account_registry.permissions import DEFAULT_PERMISSION_LEVEL
from account_registry.utils.time_utils import to_storage


def _validate_status(v):
    # Booleans are accepted from clients that send true/false
    if isinstance(v, bool):
        return int(v)
    if v not in (0, 1):
        raise ValueError("status must be 1 (active) or 0 (disabled)")
    return v


class AccountCreate(BaseModel):
    """Account creation input"""
    username: str = Field(..., min_length=1, max_length=100, description="Unique username (case-insensitive)")
    display_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    permission_level: int = Field(default=DEFAULT_PERMISSION_LEVEL, ge=1, description="Permission tier")
    expires_at: Optional[datetime] = Field(None, description="Expiry (None = never expires)")
    note: Optional[str] = Field(None, max_length=2000)
    created_by: Optional[str] = Field(None, max_length=100)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Username must not be blank"""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('Username must not be empty')
        return cleaned

    @field_validator('expires_at')
    @classmethod
    def normalize_expires_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_storage(v)


class AccountCreated(BaseModel):
    id: int
    username: str


class AccountPatch(BaseModel):
    """
    Sparse account update.

    Only fields present in the input are applied (see `changes()`); an
    explicit None clears a nullable field, an absent field is left untouched.
    """
    display_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    permission_level: Optional[int] = Field(None, ge=1)
    status: Optional[int] = None
    note: Optional[str] = Field(None, max_length=2000)

    @field_validator('permission_level')
    @classmethod
    def validate_permission_level(cls, v):
        if v is None:
            raise ValueError('permission_level cannot be cleared')
        return v

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v):
        if v is None:
            raise ValueError('status cannot be cleared')
        return _validate_status(v)

    def changes(self) -> dict:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)


class StatusUpdate(BaseModel):
    status: int

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)


class AccountView(BaseModel):
    """Account read view joined with its permission tier name"""
    id: int
    username: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    permission_level: int
    permission_name: str
    status: int
    expires_at: Optional[datetime] = None
    note: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None
    login_count: int = 0
    authorized: bool = False

    class Config:
        from_attributes = True


class AuthorizationResult(BaseModel):
    """
    Outcome of an authorization check.

    `reason` separates "exists but disabled/expired" from "never existed";
    `account` is only populated when authorized.
    """
    username: str
    authorized: bool
    exists: bool
    reason: Optional[str] = None  # "disabled" | "expired" | "not_found"
    account: Optional[AccountView] = None


class AccountStatistics(BaseModel):
    total_accounts: int
    active_accounts: int
    disabled_accounts: int
    authorized_accounts: int
    expired_accounts: int
    permission_breakdown: dict[str, int]
    recent_created: int
    generated_at: datetime
