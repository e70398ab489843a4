"""
Audit Schemas

Login events, operation events and their paginated read views
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional
from datetime import datetime

from account_registry.models.login_history import LoginStatus
from account_registry.utils.time_utils import to_storage


class LoginEvent(BaseModel):
    """Login event reported by the protected application"""
    username: str = Field(..., min_length=1, max_length=100)
    ip_address: Optional[str] = Field(None, max_length=45)
    user_agent: Optional[str] = Field(None, max_length=512)
    status: LoginStatus = LoginStatus.SUCCESS
    error_message: Optional[str] = Field(None, max_length=2000)
    login_time: Optional[datetime] = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('Username must not be empty')
        return cleaned

    @field_validator('status', mode='before')
    @classmethod
    def parse_status(cls, v):
        """Legacy clients send 1 / 0"""
        if isinstance(v, bool):
            return LoginStatus.SUCCESS if v else LoginStatus.FAILURE
        if v == 1 or v == "1":
            return LoginStatus.SUCCESS
        if v == 0 or v == "0":
            return LoginStatus.FAILURE
        return v

    @field_validator('login_time')
    @classmethod
    def normalize_login_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_storage(v)

    @property
    def succeeded(self) -> bool:
        return self.status == LoginStatus.SUCCESS


class OperationEvent(BaseModel):
    """Administrative action to append to the operation log"""
    operation: str = Field(..., min_length=1, max_length=50)
    operator: Optional[str] = Field(None, max_length=100)
    target_username: Optional[str] = None
    details: Optional[Any] = None
    ip_address: Optional[str] = Field(None, max_length=45)


class LoginHistoryItem(BaseModel):
    id: int
    username: str
    display_name: Optional[str] = None
    login_time: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    status: LoginStatus
    error_message: Optional[str] = None

    class Config:
        from_attributes = True


class OperationLogItem(BaseModel):
    id: int
    operator: str
    operation: str
    target_username: Optional[str] = None
    details: Optional[Any] = None
    ip_address: Optional[str] = None
    timestamp: datetime


class LoginHistoryPage(BaseModel):
    items: List[LoginHistoryItem]
    total: int
    limit: int
    offset: int


class OperationLogPage(BaseModel):
    items: List[OperationLogItem]
    total: int
    limit: int
    offset: int
