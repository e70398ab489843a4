"""
Audit Router

Login event intake and audit trail reads
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from account_registry.dependencies import (
    get_audit_logger,
    get_query_service,
    verify_admin_api_key,
)
from account_registry.schemas import LoginEvent, success_response
from account_registry.services import AuditLogger, QueryService
from account_registry.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["audit"])


@router.post("/login-event")
@limiter.limit("1200/minute")
async def record_login_event(
    request: Request,
    event: LoginEvent,
    audit: AuditLogger = Depends(get_audit_logger),
):
    """
    Record a login event reported by the protected application.

    IP address and user agent default to the caller's when omitted.
    """
    record_id = audit.log_login(event)
    return success_response(data={"id": record_id}, message="Login event recorded")


@router.get("/login-history")
@limiter.limit("600/minute")
async def login_history(
    request: Request,
    username: Optional[str] = Query(None, description="Filter by username"),
    limit: Optional[int] = Query(None, description="Page size"),
    offset: int = Query(0, description="Rows to skip"),
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    page = query.login_history(username, limit, offset)
    return success_response(data=page.items, total=page.total)


@router.get("/operation-logs")
@limiter.limit("600/minute")
async def operation_logs(
    request: Request,
    operator: Optional[str] = Query(None, description="Filter by operator"),
    limit: Optional[int] = Query(None, description="Page size"),
    offset: int = Query(0, description="Rows to skip"),
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    page = query.operation_logs(operator, limit, offset)
    return success_response(data=page.items, total=page.total)
