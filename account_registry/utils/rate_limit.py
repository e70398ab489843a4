"""
Rate limiting (slowapi) keyed on the validated client IP
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from account_registry.errors import Errors
from account_registry.utils.ip_utils import get_client_ip

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_client_ip)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors with the error envelope."""
    error = Errors.rate_limit(retry_after=exc.detail)
    settings = request.app.state.settings
    return JSONResponse(status_code=429, content=error.to_dict(is_production=settings.is_production))


def set_rate_limiting(enabled: bool) -> None:
    """
    Switch the shared limiter on or off.

    The route decorators are bound to one module-level Limiter, so this is
    process-wide: every app built in this process follows the last value set.
    """
    if limiter.enabled != enabled:
        logger.warning(
            f"Rate limiting {'enabled' if enabled else 'disabled'} for every app in this process"
        )
    limiter.enabled = enabled
