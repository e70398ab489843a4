"""
Export Router

CSV downloads of accounts and login history
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from account_registry.dependencies import get_query_service, verify_admin_api_key
from account_registry.services import QueryService
from account_registry.utils.csv_export import accounts_csv, login_history_csv
from account_registry.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/export", tags=["export"])


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/accounts")
@limiter.limit("30/minute")
async def export_accounts(
    request: Request,
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    accounts = query.list_accounts()
    logger.info(f"Exporting {len(accounts)} account(s) as CSV")
    return _csv_response(accounts_csv(accounts, now=query.store.now()), "accounts.csv")


@router.get("/login-history")
@limiter.limit("30/minute")
async def export_login_history(
    request: Request,
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    records = query.export_login_history()
    logger.info(f"Exporting {len(records)} login record(s) as CSV")
    return _csv_response(login_history_csv(records), "login_history.csv")
