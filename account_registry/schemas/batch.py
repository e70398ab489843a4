"""
Batch Operation Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum


class BatchAction(str, Enum):
    """Administrative verb applied to every target"""
    DELETE = "delete"
    DISABLE = "disable"
    ENABLE = "enable"


class BatchRequest(BaseModel):
    action: BatchAction
    usernames: List[str] = Field(..., min_length=1, max_length=1000)

    @field_validator('usernames')
    @classmethod
    def validate_usernames(cls, v: List[str]) -> List[str]:
        if any(not isinstance(u, str) or not u.strip() for u in v):
            raise ValueError('Usernames must be non-empty strings')
        return [u.strip() for u in v]


class BatchItemResult(BaseModel):
    """Per-username outcome; one failure never aborts the rest"""
    username: str
    status: str  # "success" | "error"
    result: Optional[bool] = None
    error: Optional[str] = None


class BatchResult(BaseModel):
    action: BatchAction
    results: List[BatchItemResult]
    succeeded: int
    failed: int
