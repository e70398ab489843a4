"""
Accounts Router

Account registry API

Security:
- Everything except the authorization check requires X-Admin-API-Key
- Rate limiting on all endpoints
"""
import logging

from fastapi import APIRouter, Depends, Request

from account_registry.dependencies import (
    get_account_service,
    get_query_service,
    verify_admin_api_key,
)
from account_registry.schemas import (
    AccountCreate,
    AccountPatch,
    BatchRequest,
    StatusUpdate,
    success_response,
)
from account_registry.services import AccountService, QueryService
from account_registry.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("")
@limiter.limit("600/minute")
async def list_accounts(
    request: Request,
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    """List all accounts, newest first."""
    accounts = query.list_accounts()
    return success_response(data=accounts, total=len(accounts))


@router.post("", status_code=201)
@limiter.limit("300/minute")
async def add_account(
    request: Request,
    data: AccountCreate,
    service: AccountService = Depends(get_account_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    """Add an account (409 when the username exists in any letter case)."""
    created = service.add_account(data)
    return success_response(data=created, message="Account added")


@router.post("/batch")
@limiter.limit("60/minute")
async def batch_accounts(
    request: Request,
    data: BatchRequest,
    service: AccountService = Depends(get_account_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    """Apply delete / disable / enable to a list of usernames."""
    result = service.run_batch(data)
    return success_response(
        data=result.results,
        message=f"Batch {result.action.value} finished: {result.succeeded} succeeded, {result.failed} failed",
        total=len(result.results),
    )


@router.get("/id/{account_id:int}")
@limiter.limit("600/minute")
async def get_account_by_id(
    request: Request,
    account_id: int,
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    return success_response(data=query.get_account_by_id(account_id))


@router.put("/id/{account_id:int}")
@limiter.limit("300/minute")
async def update_account_by_id(
    request: Request,
    account_id: int,
    data: AccountPatch,
    service: AccountService = Depends(get_account_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    account = service.update_fields_by_id(account_id, data)
    return success_response(data=account, message="Account updated")


@router.delete("/id/{account_id:int}")
@limiter.limit("300/minute")
async def delete_account_by_id(
    request: Request,
    account_id: int,
    service: AccountService = Depends(get_account_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    service.delete_account_by_id(account_id)
    return success_response(message="Account deleted")


@router.get("/{username}/check")
@limiter.limit("1200/minute")
async def check_authorization(
    request: Request,
    username: str,
    query: QueryService = Depends(get_query_service),
):
    """
    Check whether an account may access the protected application.

    Unknown and disabled/expired accounts are both "not authorized";
    data.reason tells them apart.
    """
    result = query.check_authorization(username)
    message = None if result.authorized else "Account is not authorized or has expired"
    return success_response(data=result, message=message)


@router.get("/{username}")
@limiter.limit("600/minute")
async def get_account(
    request: Request,
    username: str,
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    return success_response(data=query.get_account(username))


@router.put("/{username}")
@limiter.limit("300/minute")
async def update_account(
    request: Request,
    username: str,
    data: AccountPatch,
    service: AccountService = Depends(get_account_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    """Sparse update: only fields present in the body change."""
    account = service.update_fields(username, data)
    return success_response(data=account, message="Account updated")


@router.patch("/{username}/status")
@limiter.limit("300/minute")
async def update_account_status(
    request: Request,
    username: str,
    data: StatusUpdate,
    service: AccountService = Depends(get_account_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    status = service.update_status(username, data.status)
    return success_response(message="Account enabled" if status == 1 else "Account disabled")


@router.delete("/{username}")
@limiter.limit("300/minute")
async def delete_account(
    request: Request,
    username: str,
    service: AccountService = Depends(get_account_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    service.delete_account(username)
    return success_response(message="Account deleted")
