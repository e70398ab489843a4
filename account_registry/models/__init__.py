"""
Database models
- Account: authorized account registry entry
- PermissionLevel: static permission tier catalog
- LoginHistory: append-only login events
- OperationLog: append-only administrative audit trail
"""
from account_registry.models.account import Account, normalize_username
from account_registry.models.permission_level import PermissionLevel
from account_registry.models.login_history import LoginHistory, LoginStatus
from account_registry.models.operation_log import OperationLog

__all__ = [
    'Account',
    'normalize_username',
    'PermissionLevel',
    'LoginHistory',
    'LoginStatus',
    'OperationLog',
]
