"""
Account Service

Every account mutation runs in one transaction together with exactly one
operation log record. Batch actions isolate each target in its own
transaction and finish with a single aggregate record.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from account_registry.errors import AppError, Errors
from account_registry.schemas import (
    AccountCreate,
    AccountCreated,
    AccountPatch,
    AccountView,
    BatchAction,
    BatchItemResult,
    BatchRequest,
    BatchResult,
    StatusUpdate,
    parse_input,
)
from account_registry.services.account_store import AccountStore
from account_registry.services.audit_logger import AuditLogger

logger = logging.getLogger(__name__)


def _require_username(username: Optional[str]) -> str:
    if not username or not username.strip():
        raise Errors.validation("Username must not be empty", {"field": "username"})
    return username.strip()


class AccountService:
    """
    Account mutations paired with their audit record.

    Each public method runs one transaction that holds both the change and
    exactly one operation log entry attributed to the request's operator.
    """

    def __init__(self, store: AccountStore, audit: AuditLogger) -> None:
        self.store = store
        self.audit = audit

    def add_account(self, data) -> AccountCreated:
        """
        Create an account and log ADD_ACCOUNT.

        Raises:
            ValidationError: input malformed
            ConflictError: username already exists (case-insensitive)
        """
        data = parse_input(AccountCreate, data)
        if data.created_by is None:
            data = data.model_copy(update={"created_by": self.audit.operator})

        with self.store.transaction() as db:
            created = self.store.add_account(data, db=db)
            self.audit.log_operation(
                "ADD_ACCOUNT", created.username, data.model_dump(mode="json"), db=db
            )
        return created

    def _username_for_id(self, account_id: int, db: Session) -> str:
        account = self.store.get_account_by_id(account_id, db=db)
        if account is None:
            logger.warning(f"Account not found: id={account_id}")
            raise Errors.not_found("Account", account_id)
        return account.username

    def _delete(self, username: str, db: Session) -> None:
        if not self.store.delete_account(username, db=db):
            logger.warning(f"Delete failed, account not found: username={username}")
            raise Errors.not_found("Account", username)
        self.audit.log_operation(
            "DELETE_ACCOUNT", username, {"deleted_by": self.audit.operator}, db=db
        )

    def delete_account(self, username: str) -> None:
        """Hard-delete an account and log DELETE_ACCOUNT (NotFoundError when absent)."""
        username = _require_username(username)
        with self.store.transaction() as db:
            self._delete(username, db)

    def delete_account_by_id(self, account_id: int) -> None:
        with self.store.transaction() as db:
            self._delete(self._username_for_id(account_id, db), db)

    def update_status(self, username: str, status) -> int:
        """
        Enable (1) or disable (0) an account and log UPDATE_STATUS.

        Returns:
            The status written
        """
        username = _require_username(username)
        status = parse_input(StatusUpdate, {"status": status}).status
        with self.store.transaction() as db:
            if not self.store.update_account_status(username, status, db=db):
                logger.warning(f"Status update failed, account not found: username={username}")
                raise Errors.not_found("Account", username)
            self.audit.log_operation("UPDATE_STATUS", username, {"new_status": status}, db=db)
        return status

    def _update_fields(self, username: str, patch: AccountPatch, db: Session) -> AccountView:
        view = self.store.update_account_fields(username, patch, db=db)
        if view is None:
            logger.warning(f"Update failed, account not found: username={username}")
            raise Errors.not_found("Account", username)
        self.audit.log_operation(
            "UPDATE_ACCOUNT", view.username, {"changes": patch.model_dump(mode="json", exclude_unset=True)}, db=db
        )
        return view

    @staticmethod
    def _parse_patch(patch) -> AccountPatch:
        patch = parse_input(AccountPatch, patch)
        if not patch.changes():
            raise Errors.validation("No updatable fields provided")
        return patch

    def update_fields(self, username: str, patch) -> AccountView:
        """
        Apply a sparse patch and log UPDATE_ACCOUNT with the provided fields.

        Raises:
            ValidationError: empty or malformed patch
            NotFoundError: no such account
        """
        username = _require_username(username)
        patch = self._parse_patch(patch)
        with self.store.transaction() as db:
            return self._update_fields(username, patch, db)

    def update_fields_by_id(self, account_id: int, patch) -> AccountView:
        patch = self._parse_patch(patch)
        with self.store.transaction() as db:
            return self._update_fields(self._username_for_id(account_id, db), patch, db)

    # ===== Batch =====

    def _apply(self, action: BatchAction, username: str, db: Session) -> bool:
        if action == BatchAction.DELETE:
            return self.store.delete_account(username, db=db)
        if action == BatchAction.DISABLE:
            return self.store.update_account_status(username, 0, db=db)
        return self.store.update_account_status(username, 1, db=db)

    def run_batch(self, request) -> BatchResult:
        """
        Apply one action to every username.

        A failing target is reported in its own result and never stops the
        remaining ones; the aggregate audit record is written regardless.
        """
        request = parse_input(BatchRequest, request)
        results = []

        for username in request.usernames:
            try:
                with self.store.transaction() as db:
                    changed = self._apply(request.action, username, db)
            except AppError as e:
                logger.error(f"Batch {request.action.value} failed: username={username}, error={e.message}")
                results.append(BatchItemResult(username=username, status="error", error=e.message))
                continue

            if changed:
                results.append(BatchItemResult(username=username, status="success", result=True))
            else:
                results.append(
                    BatchItemResult(username=username, status="error", result=False, error="not found")
                )

        with self.store.transaction() as db:
            self.audit.log_operation(
                f"BATCH_{request.action.value.upper()}",
                ", ".join(request.usernames),
                {
                    "action": request.action.value,
                    "usernames": request.usernames,
                    "results": [r.model_dump() for r in results],
                },
                db=db,
            )

        failed = sum(1 for r in results if r.status == "error")
        logger.info(
            f"Batch {request.action.value} finished: total={len(results)}, failed={failed}"
        )
        return BatchResult(
            action=request.action,
            results=results,
            succeeded=len(results) - failed,
            failed=failed,
        )
