"""
CSV Export

Renders account and login history rows for spreadsheet tools: every field
quoted, embedded quotes doubled, UTF-8 byte-order mark up front so non-ASCII
text displays correctly.
"""
import csv
import io
from datetime import datetime
from typing import Iterable, List, Optional

from account_registry.models.login_history import LoginStatus
from account_registry.schemas import AccountView, LoginHistoryItem
from account_registry.utils.time_utils import is_expired

BOM = "\ufeff"

ACCOUNT_HEADERS = [
    "Username",
    "Display Name",
    "Email",
    "Permission",
    "Status",
    "Expires At",
    "Created At",
    "Last Login",
    "Login Count",
    "Note",
]

LOGIN_HISTORY_HEADERS = [
    "Username",
    "Display Name",
    "Login Time",
    "IP Address",
    "User Agent",
    "Status",
    "Error Message",
]


def _fmt(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return str(value)


def _render(headers: List[str], rows: Iterable[List]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_fmt(value) for value in row])
    return BOM + buffer.getvalue()


def _account_status_label(account: AccountView, now: Optional[datetime]) -> str:
    if account.status != 1:
        return "Disabled"
    if now is not None and is_expired(account.expires_at, now):
        return "Expired"
    return "Active"


def accounts_csv(accounts: Iterable[AccountView], now: Optional[datetime] = None) -> str:
    """One row per account."""
    return _render(
        ACCOUNT_HEADERS,
        (
            [
                account.username,
                account.display_name,
                account.email,
                account.permission_name,
                _account_status_label(account, now),
                account.expires_at or "Never",
                account.created_at,
                account.last_login_at or "Never logged in",
                account.login_count,
                account.note,
            ]
            for account in accounts
        ),
    )


def login_history_csv(records: Iterable[LoginHistoryItem]) -> str:
    """One row per login history record."""
    return _render(
        LOGIN_HISTORY_HEADERS,
        (
            [
                record.username,
                record.display_name,
                record.login_time,
                record.ip_address,
                record.user_agent,
                "Success" if record.status == LoginStatus.SUCCESS else "Failure",
                record.error_message,
            ]
            for record in records
        ),
    )
