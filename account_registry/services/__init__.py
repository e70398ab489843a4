from account_registry.services.account_store import AccountStore
from account_registry.services.audit_logger import AuditLogger
from account_registry.services.account_service import AccountService
from account_registry.services.query_service import QueryService

__all__ = [
    'AccountStore',
    'AuditLogger',
    'AccountService',
    'QueryService',
]
