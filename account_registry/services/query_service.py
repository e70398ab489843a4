"""
Query Service

Read-side helpers over the store: listings, authorization checks, paginated
audit reads and statistics.
"""
import logging
from typing import List, Optional

from account_registry.config import Settings
from account_registry.errors import Errors
from account_registry.schemas import (
    AccountStatistics,
    AccountView,
    AuthorizationResult,
    LoginHistoryItem,
    LoginHistoryPage,
    OperationLogPage,
)
from account_registry.services.account_store import AccountStore

logger = logging.getLogger(__name__)

EXPORT_HISTORY_LIMIT = 1000


class QueryService:
    def __init__(self, store: AccountStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    def _page_bounds(self, limit: Optional[int], offset: Optional[int]) -> tuple:
        limit = self.settings.DEFAULT_PAGE_SIZE if limit is None else limit
        offset = 0 if offset is None else offset
        if limit < 1:
            raise Errors.validation("limit must be at least 1", {"limit": limit})
        if offset < 0:
            raise Errors.validation("offset must not be negative", {"offset": offset})
        return min(limit, self.settings.MAX_PAGE_SIZE), offset

    def list_accounts(self) -> List[AccountView]:
        return self.store.list_accounts()

    def get_account(self, username: str) -> AccountView:
        account = self.store.get_account(username)
        if account is None:
            raise Errors.not_found("Account", username)
        return account

    def get_account_by_id(self, account_id: int) -> AccountView:
        account = self.store.get_account_by_id(account_id)
        if account is None:
            raise Errors.not_found("Account", account_id)
        return account

    def check_authorization(self, username: str) -> AuthorizationResult:
        if not username or not username.strip():
            raise Errors.validation("Username must not be empty", {"field": "username"})
        result = self.store.check_authorization(username.strip())
        if not result.authorized:
            logger.info(f"Authorization denied: username={username}, reason={result.reason}")
        return result

    def login_history(
        self, username: Optional[str] = None, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> LoginHistoryPage:
        limit, offset = self._page_bounds(limit, offset)
        items, total = self.store.get_login_history(username, limit, offset)
        return LoginHistoryPage(items=items, total=total, limit=limit, offset=offset)

    def operation_logs(
        self, operator: Optional[str] = None, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> OperationLogPage:
        limit, offset = self._page_bounds(limit, offset)
        items, total = self.store.get_operation_logs(operator, limit, offset)
        return OperationLogPage(items=items, total=total, limit=limit, offset=offset)

    def statistics(self) -> AccountStatistics:
        return self.store.account_statistics()

    def export_login_history(self) -> List[LoginHistoryItem]:
        items, _ = self.store.get_login_history(None, EXPORT_HISTORY_LIMIT, 0)
        return items
