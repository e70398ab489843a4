"""
IP Utilities
Client IP / user agent extraction for rate limiting and audit records

Security:
- Validates trusted proxies before trusting X-Forwarded-For
- Prevents IP spoofing in audit records and rate limiting
"""
import os
import ipaddress
import logging
from dataclasses import dataclass
from typing import List, Optional
from fastapi import Request

logger = logging.getLogger(__name__)

DEFAULT_OPERATOR = "api"


@dataclass(frozen=True)
class RequestContext:
    """Caller details used to fill audit defaults"""
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    operator: str = DEFAULT_OPERATOR


def _get_trusted_proxies() -> List[str]:
    """
    Get list of trusted proxy IPs/CIDRs.

    Returns:
        List of trusted proxy IP addresses or CIDR ranges
    """
    env_proxies = os.environ.get("TRUSTED_PROXIES", "")
    if env_proxies:
        return [p.strip() for p in env_proxies.split(",") if p.strip()]

    # Default trusted ranges: localhost and private networks
    return [
        "127.0.0.1",
        "::1",
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
    ]


def _is_trusted_proxy(ip: str) -> bool:
    """
    Check if an IP address is from a trusted proxy.

    Args:
        ip: IP address to check

    Returns:
        True if IP is in trusted proxy list
    """
    if not ip:
        return False

    try:
        client_addr = ipaddress.ip_address(ip)
    except ValueError:
        return False

    for proxy in _get_trusted_proxies():
        try:
            if "/" in proxy:
                if client_addr in ipaddress.ip_network(proxy, strict=False):
                    return True
            elif client_addr == ipaddress.ip_address(proxy):
                return True
        except ValueError:
            continue

    return False


def get_client_ip(request: Request) -> str:
    """
    Extract client IP from request with security validation.

    X-Forwarded-For is only honoured when the direct peer is a trusted proxy;
    the first address in it that is not itself a proxy is the client.

    Args:
        request: FastAPI Request object

    Returns:
        Client IP address string
    """
    direct_ip = request.client.host if request.client else None

    if direct_ip and _is_trusted_proxy(direct_ip):
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # X-Forwarded-For format: "client, proxy1, proxy2"
            ips = [ip.strip() for ip in forwarded_for.split(",")]
            for ip in ips:
                if ip and not _is_trusted_proxy(ip):
                    return ip
            if ips and ips[0]:
                return ips[0]

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

    if direct_ip:
        return direct_ip

    return "unknown"


def request_context(request: Request, operator: Optional[str] = None) -> RequestContext:
    """Build the audit context for an incoming request."""
    user_agent = request.headers.get("User-Agent")
    return RequestContext(
        ip_address=get_client_ip(request),
        user_agent=user_agent[:512] if user_agent else None,
        operator=(operator or "").strip()[:100] or DEFAULT_OPERATOR,
    )
