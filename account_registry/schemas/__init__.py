"""
Pydantic Schemas
- account: account input / view / authorization result
- audit: login + operation events and pages
- batch: batch actions
- common: response envelopes
"""
from account_registry.schemas.account import (
    AccountCreate,
    AccountCreated,
    AccountPatch,
    AccountStatistics,
    AccountView,
    AuthorizationResult,
    StatusUpdate,
)
from account_registry.schemas.audit import (
    LoginEvent,
    LoginHistoryItem,
    LoginHistoryPage,
    OperationEvent,
    OperationLogItem,
    OperationLogPage,
)
from account_registry.schemas.batch import (
    BatchAction,
    BatchItemResult,
    BatchRequest,
    BatchResult,
)
from account_registry.schemas.common import ApiResponse, parse_input, success_response

__all__ = [
    'AccountCreate',
    'AccountCreated',
    'AccountPatch',
    'AccountStatistics',
    'AccountView',
    'AuthorizationResult',
    'StatusUpdate',
    'LoginEvent',
    'LoginHistoryItem',
    'LoginHistoryPage',
    'OperationEvent',
    'OperationLogItem',
    'OperationLogPage',
    'BatchAction',
    'BatchItemResult',
    'BatchRequest',
    'BatchResult',
    'ApiResponse',
    'parse_input',
    'success_response',
]
