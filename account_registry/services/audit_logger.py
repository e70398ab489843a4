"""
Audit Logger

Thin layer over the store's append operations. Its only job is filling the
caller's IP address, user agent and operator from the request context when the
event does not carry them.
"""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from account_registry.schemas import LoginEvent, OperationEvent, parse_input
from account_registry.services.account_store import AccountStore
from account_registry.utils.ip_utils import RequestContext

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(self, store: AccountStore, context: Optional[RequestContext] = None) -> None:
        self.store = store
        self.context = context or RequestContext()

    @property
    def operator(self) -> str:
        return self.context.operator

    def log_login(self, event, db: Optional[Session] = None) -> int:
        """Record a login event, defaulting ip_address / user_agent from the request."""
        event = parse_input(LoginEvent, event)
        event = event.model_copy(
            update={
                "ip_address": event.ip_address or self.context.ip_address,
                "user_agent": event.user_agent or self.context.user_agent,
            }
        )
        record_id = self.store.log_login(event, db=db)
        logger.info(
            f"Login event recorded: id={record_id}, username={event.username}, status={event.status.value}"
        )
        return record_id

    def log_operation(
        self,
        operation: str,
        target_username: Optional[str] = None,
        details: Any = None,
        db: Optional[Session] = None,
    ) -> int:
        """Append one operation log record attributed to the current operator."""
        event = OperationEvent(
            operation=operation,
            operator=self.context.operator,
            target_username=target_username,
            details=details,
            ip_address=self.context.ip_address,
        )
        record_id = self.store.log_operation(event, db=db)
        logger.info(
            f"[AUDIT] {operation} by {self.context.operator}: target={target_username}, id={record_id}"
        )
        return record_id
