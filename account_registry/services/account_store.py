"""
Authorization Store

Owns every persisted row (accounts, login history, operation logs) and exposes
the read/write operations over them. Each public operation is one unit of work:
it either runs inside the session handed in by the caller or opens, commits and
closes its own.
"""
import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from account_registry.errors import Errors
from account_registry.models import (
    Account,
    LoginHistory,
    OperationLog,
    PermissionLevel,
    normalize_username,
)
from account_registry.permissions import PERMISSION_LEVELS, name_for
from account_registry.schemas import (
    AccountCreate,
    AccountCreated,
    AccountPatch,
    AccountStatistics,
    AccountView,
    AuthorizationResult,
    LoginEvent,
    LoginHistoryItem,
    OperationEvent,
    OperationLogItem,
    StatusUpdate,
    parse_input,
)
from account_registry.utils.time_utils import days_ago, utcnow

logger = logging.getLogger(__name__)

RECENT_DAYS = 7


def _serialize_details(details) -> Optional[str]:
    if details is None:
        return None
    return json.dumps(details, ensure_ascii=False, default=str)


def _deserialize_details(raw: Optional[str]):
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Operation log details are not valid JSON; returning raw text")
        return raw


class AccountStore:
    """
    Single authoritative store for accounts, login history and operation logs.

    One instance is shared by every entry point. `clock` supplies the
    reference time for expiry checks and timestamps.
    """

    def __init__(self, session_factory: sessionmaker, clock: Callable[[], datetime] = utcnow) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    # ===== Units of work =====

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Open a session, commit on success, roll back on any error.

        Storage failures surface as StorageError; the session is closed on
        every exit path.
        """
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error, transaction rolled back: {e}")
            raise Errors.storage(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @contextmanager
    def _unit(self, db: Optional[Session]) -> Iterator[Session]:
        if db is not None:
            yield db
            return
        with self.transaction() as own:
            yield own

    # ===== Query helpers =====

    @staticmethod
    def _authorized_clause(now: datetime):
        # Exclusive expiry: still valid only while expires_at > now
        return and_(
            Account.status == 1,
            or_(Account.expires_at.is_(None), Account.expires_at > now),
        )

    def _account_query(self, db: Session, now: datetime):
        return db.query(
            Account,
            PermissionLevel.name,
            self._authorized_clause(now).label("authorized"),
        ).outerjoin(PermissionLevel, PermissionLevel.id == Account.permission_level)

    @staticmethod
    def _to_view(account: Account, permission_name: Optional[str], authorized) -> AccountView:
        data = {column.name: getattr(account, column.name) for column in Account.__table__.columns}
        data["permission_name"] = permission_name or name_for(account.permission_level)
        data["authorized"] = bool(authorized)
        return AccountView.model_validate(data)

    @staticmethod
    def _check_page(limit: int, offset: int) -> None:
        if limit < 1:
            raise Errors.validation("limit must be at least 1", {"limit": limit})
        if offset < 0:
            raise Errors.validation("offset must not be negative", {"offset": offset})

    # ===== Accounts =====

    def list_accounts(self, db: Optional[Session] = None) -> List[AccountView]:
        """All accounts, newest first, each joined with its tier name."""
        now = self._clock()
        with self._unit(db) as session:
            rows = (
                self._account_query(session, now)
                .order_by(Account.created_at.desc(), Account.id.desc())
                .all()
            )
            return [self._to_view(*row) for row in rows]

    def count_accounts(self, db: Optional[Session] = None) -> int:
        """Number of stored accounts."""
        with self._unit(db) as session:
            return session.query(func.count(Account.id)).scalar() or 0

    def get_account(self, username: str, db: Optional[Session] = None) -> Optional[AccountView]:
        """
        Look up one account by username (any letter case).

        Returns:
            The account view, or None when no account matched
        """
        now = self._clock()
        with self._unit(db) as session:
            row = (
                self._account_query(session, now)
                .filter(Account.username_key == normalize_username(username))
                .first()
            )
            return self._to_view(*row) if row else None

    def get_account_by_id(self, account_id: int, db: Optional[Session] = None) -> Optional[AccountView]:
        now = self._clock()
        with self._unit(db) as session:
            row = self._account_query(session, now).filter(Account.id == account_id).first()
            return self._to_view(*row) if row else None

    def add_account(self, data, db: Optional[Session] = None) -> AccountCreated:
        """
        Insert a new active account.

        Raises:
            ValidationError: username missing or input malformed
            ConflictError: username already exists (case-insensitive)
        """
        data = parse_input(AccountCreate, data)
        key = normalize_username(data.username)

        with self._unit(db) as session:
            existing = session.query(Account.id).filter(Account.username_key == key).first()
            if existing:
                logger.warning(f"Add rejected, username exists: username={data.username}")
                raise Errors.conflict(
                    f"Account '{data.username}' already exists", {"username": data.username}
                )

            now = self._clock()
            account = Account(
                username=data.username,
                username_key=key,
                display_name=data.display_name,
                email=data.email,
                permission_level=data.permission_level,
                status=1,
                expires_at=data.expires_at,
                note=data.note,
                created_by=data.created_by,
                created_at=now,
                updated_at=now,
                last_login_at=None,
                login_count=0,
            )
            session.add(account)
            try:
                # The unique index on username_key settles concurrent duplicates
                session.flush()
            except IntegrityError as e:
                logger.warning(f"Add rejected by unique index: username={data.username}")
                raise Errors.conflict(
                    f"Account '{data.username}' already exists", {"username": data.username}
                ) from e

            logger.info(f"Account added: id={account.id}, username={account.username}")
            return AccountCreated(id=account.id, username=account.username)

    def delete_account(self, username: str, db: Optional[Session] = None) -> bool:
        """Hard delete. Returns False when no account matched."""
        with self._unit(db) as session:
            removed = (
                session.query(Account)
                .filter(Account.username_key == normalize_username(username))
                .delete(synchronize_session=False)
            )
        if removed:
            logger.info(f"Account deleted: username={username}")
        return removed > 0

    def update_account_status(self, username: str, status, db: Optional[Session] = None) -> bool:
        """Set status (1 active / 0 disabled). Returns False when no account matched."""
        status = parse_input(StatusUpdate, {"status": status}).status
        with self._unit(db) as session:
            updated = (
                session.query(Account)
                .filter(Account.username_key == normalize_username(username))
                .update(
                    {Account.status: status, Account.updated_at: self._clock()},
                    synchronize_session=False,
                )
            )
        if updated:
            logger.info(f"Account status updated: username={username}, status={status}")
        return updated > 0

    def update_account_fields(self, username: str, patch, db: Optional[Session] = None) -> Optional[AccountView]:
        """
        Merge the fields present in `patch` into the account.

        Returns:
            The updated view, or None when no account matched
        """
        changes = parse_input(AccountPatch, patch).changes()
        key = normalize_username(username)

        with self._unit(db) as session:
            account = session.query(Account).filter(Account.username_key == key).first()
            if account is None:
                return None

            for field, value in changes.items():
                setattr(account, field, value)
            now = self._clock()
            account.updated_at = now
            session.flush()

            row = self._account_query(session, now).filter(Account.id == account.id).first()
            logger.info(f"Account updated: username={account.username}, fields={sorted(changes)}")
            return self._to_view(*row)

    def check_authorization(self, username: str, db: Optional[Session] = None) -> AuthorizationResult:
        """
        Evaluate the authorization predicate in the query against the store clock.
        """
        now = self._clock()
        with self._unit(db) as session:
            row = (
                self._account_query(session, now)
                .filter(Account.username_key == normalize_username(username))
                .first()
            )

        if row is None:
            return AuthorizationResult(
                username=username, authorized=False, exists=False, reason="not_found"
            )

        account, permission_name, authorized = row
        if authorized:
            return AuthorizationResult(
                username=account.username,
                authorized=True,
                exists=True,
                account=self._to_view(account, permission_name, authorized),
            )

        reason = "disabled" if account.status != 1 else "expired"
        return AuthorizationResult(
            username=account.username, authorized=False, exists=True, reason=reason
        )

    # ===== Audit trail =====

    def log_login(self, event, db: Optional[Session] = None) -> int:
        """
        Append a login history row; a successful login also bumps the
        account's login_count and last_login_at in the same transaction.
        """
        event = parse_input(LoginEvent, event)
        key = normalize_username(event.username)
        login_time = event.login_time or self._clock()

        with self._unit(db) as session:
            record = LoginHistory(
                username=event.username,
                username_key=key,
                login_time=login_time,
                ip_address=event.ip_address,
                user_agent=event.user_agent,
                status=event.status,
                error_message=event.error_message,
            )
            session.add(record)
            session.flush()

            if event.succeeded:
                updated = (
                    session.query(Account)
                    .filter(Account.username_key == key)
                    .update(
                        {
                            Account.login_count: Account.login_count + 1,
                            Account.last_login_at: login_time,
                        },
                        synchronize_session=False,
                    )
                )
                if not updated:
                    logger.debug(f"Login recorded for unknown account: username={event.username}")

            return record.id

    def log_operation(self, event, db: Optional[Session] = None) -> int:
        """
        Append one operation log record.

        Args:
            event: OperationEvent (or dict); details are stored as JSON text

        Returns:
            Id of the new record
        """
        event = parse_input(OperationEvent, event)
        with self._unit(db) as session:
            record = OperationLog(
                operator=event.operator or "system",
                operation=event.operation,
                target_username=event.target_username,
                details=_serialize_details(event.details),
                ip_address=event.ip_address,
                timestamp=self._clock(),
            )
            session.add(record)
            session.flush()
            return record.id

    def get_login_history(
        self,
        username: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        db: Optional[Session] = None,
    ) -> Tuple[List[LoginHistoryItem], int]:
        """Reverse-chronological login history page and the total match count."""
        self._check_page(limit, offset)
        with self._unit(db) as session:
            query = session.query(LoginHistory, Account.display_name).outerjoin(
                Account, Account.username_key == LoginHistory.username_key
            )
            if username:
                query = query.filter(LoginHistory.username_key == normalize_username(username))

            total = query.count()
            rows = (
                query.order_by(LoginHistory.login_time.desc(), LoginHistory.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )

            items = []
            for record, display_name in rows:
                item = LoginHistoryItem.model_validate(record)
                item.display_name = display_name
                items.append(item)
            return items, total

    def get_operation_logs(
        self,
        operator: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        db: Optional[Session] = None,
    ) -> Tuple[List[OperationLogItem], int]:
        """Reverse-chronological operation log page with details deserialized."""
        self._check_page(limit, offset)
        with self._unit(db) as session:
            query = session.query(OperationLog)
            if operator:
                query = query.filter(OperationLog.operator == operator)

            total = query.count()
            rows = (
                query.order_by(OperationLog.timestamp.desc(), OperationLog.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            items = [
                OperationLogItem(
                    id=row.id,
                    operator=row.operator,
                    operation=row.operation,
                    target_username=row.target_username,
                    details=_deserialize_details(row.details),
                    ip_address=row.ip_address,
                    timestamp=row.timestamp,
                )
                for row in rows
            ]
            return items, total

    # ===== Statistics =====

    def account_statistics(self, db: Optional[Session] = None) -> AccountStatistics:
        """Account counts by state and tier, evaluated against the store clock."""
        now = self._clock()
        with self._unit(db) as session:
            count = func.count(Account.id)
            total = session.query(count).scalar() or 0
            active = session.query(count).filter(Account.status == 1).scalar() or 0
            authorized = session.query(count).filter(self._authorized_clause(now)).scalar() or 0
            expired = (
                session.query(count)
                .filter(
                    Account.status == 1,
                    Account.expires_at.isnot(None),
                    Account.expires_at <= now,
                )
                .scalar()
                or 0
            )
            recent = (
                session.query(count)
                .filter(Account.created_at > days_ago(RECENT_DAYS, now))
                .scalar()
                or 0
            )
            per_level = (
                session.query(Account.permission_level, count)
                .group_by(Account.permission_level)
                .all()
            )

        breakdown = {f"level_{level}": 0 for level in PERMISSION_LEVELS}
        for level, level_count in per_level:
            breakdown[f"level_{level}"] = level_count

        return AccountStatistics(
            total_accounts=total,
            active_accounts=active,
            disabled_accounts=total - active,
            authorized_accounts=authorized,
            expired_accounts=expired,
            permission_breakdown=breakdown,
            recent_created=recent,
            generated_at=now,
        )
