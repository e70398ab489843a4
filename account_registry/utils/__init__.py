"""
Utility Functions
- ip_utils: client IP extraction and request audit context
- time_utils: UTC timestamp helpers
- csv_export: spreadsheet-friendly CSV rendering (import directly; depends on schemas)
"""
from account_registry.utils.ip_utils import (
    RequestContext,
    get_client_ip,
    request_context,
)
from account_registry.utils.time_utils import (
    utcnow,
    to_storage,
    is_expired,
)

__all__ = [
    'RequestContext',
    'get_client_ip',
    'request_context',
    'utcnow',
    'to_storage',
    'is_expired',
]
