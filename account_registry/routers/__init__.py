"""
API Routers
- accounts: account registry endpoints
- audit: login events, login history, operation logs
- export: CSV downloads
- system: health and statistics
"""
from account_registry.routers.accounts import router as accounts_router
from account_registry.routers.audit import router as audit_router
from account_registry.routers.export import router as export_router
from account_registry.routers.system import router as system_router

__all__ = [
    'accounts_router',
    'audit_router',
    'export_router',
    'system_router',
]
