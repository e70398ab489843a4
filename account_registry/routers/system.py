"""
System Router

Health check and registry statistics
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from account_registry.config import Settings
from account_registry.dependencies import (
    get_app_settings,
    get_query_service,
    verify_admin_api_key,
)
from account_registry.schemas import success_response
from account_registry.services import QueryService
from account_registry.utils.rate_limit import limiter

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health")
async def health(settings: Settings = Depends(get_app_settings)):
    return success_response(
        data={
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        message="Service is healthy",
    )


@router.get("/statistics")
@limiter.limit("600/minute")
async def statistics(
    request: Request,
    query: QueryService = Depends(get_query_service),
    _admin: bool = Depends(verify_admin_api_key),
):
    return success_response(data=query.statistics())
