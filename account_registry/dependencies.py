"""
Dependencies
FastAPI dependency injection

The store is built once in create_app() and handed to every request through
app.state; handlers never construct their own copy of account data.
"""
import logging
import secrets
from typing import Optional
from fastapi import Depends, Header, Request
from account_registry.config import Settings
from account_registry.errors import AppError, Errors
from account_registry.services import AccountService, AccountStore, AuditLogger, QueryService
from account_registry.utils.ip_utils import RequestContext, request_context

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> AccountStore:
    return request.app.state.store


def get_request_context(
    request: Request,
    x_operator: Optional[str] = Header(None, alias="X-Operator", description="Operator recorded in audit logs"),
) -> RequestContext:
    return request_context(request, operator=x_operator)


def get_audit_logger(
    store: AccountStore = Depends(get_store),
    context: RequestContext = Depends(get_request_context),
) -> AuditLogger:
    return AuditLogger(store, context)


def get_account_service(
    store: AccountStore = Depends(get_store),
    audit: AuditLogger = Depends(get_audit_logger),
) -> AccountService:
    return AccountService(store, audit)


def get_query_service(
    store: AccountStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> QueryService:
    return QueryService(store, settings)


async def verify_admin_api_key(
    x_admin_api_key: Optional[str] = Header(None, alias="X-Admin-API-Key", description="Admin API Key"),
    settings: Settings = Depends(get_app_settings),
) -> bool:
    """
    Verify admin API key for protected endpoints

    Raises:
        AuthError: 401 if key is missing or invalid
    """
    # No bypass in any environment: an unconfigured key locks admin routes.
    if not settings.ADMIN_API_KEY:
        raise AppError("Admin API key not configured on server", code="INTERNAL_ERROR", status=500)

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest((x_admin_api_key or "").strip(), settings.ADMIN_API_KEY):
        logger.warning("Rejected request with invalid admin API key")
        raise Errors.auth("Invalid admin API key")

    return True
