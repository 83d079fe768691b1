"""Shared FastAPI dependencies."""

import secrets
from uuid import UUID

from fastapi import Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.config import settings
from custom_domains.database import get_session
from custom_domains.models.account import Account
from custom_domains.schemas.common import raise_api_error
from custom_domains.services.domain_registry import get_account
from custom_domains.services.errors import NotFoundError
from custom_domains.utils.rate_limiter import domain_rate_limiter


async def get_current_account(
    x_account_id: str | None = Header(default=None),
    db: AsyncSession = Depends(get_session),
) -> Account:
    """
    Resolve the calling account from the X-Account-Id header.

    The header is set by the upstream authentication gateway after it has
    validated the user's session; this service trusts it.
    """
    if not x_account_id:
        raise_api_error(
            code="UNAUTHORIZED",
            message="Not signed in. Sign in and try again.",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    try:
        account_id = UUID(x_account_id)
    except ValueError:
        raise_api_error(
            code="UNAUTHORIZED",
            message="Invalid account identity. Sign in again.",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    try:
        return await get_account(db, account_id)
    except NotFoundError as e:
        raise_api_error(code=e.code, message=e.message, status_code=e.status_code)


def require_deployment_secret(
    x_deployment_secret: str | None = Header(default=None),
) -> None:
    """Verify the shared secret sent by the deployment platform webhook."""
    if not x_deployment_secret or not secrets.compare_digest(
        x_deployment_secret, settings.DEPLOYMENT_WEBHOOK_SECRET
    ):
        raise_api_error(
            code="UNAUTHORIZED",
            message="Invalid deployment webhook secret",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


def _client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limit_domain_checks(request: Request) -> None:
    """
    Limit DNS-backed domain endpoints per client IP and path.

    Each check or verification can trigger outbound DNS lookups, so these
    paths get a per-minute budget; exceeding it returns 429 with Retry-After.
    """
    key = f"{_client_ip(request)}:{request.url.path}"
    allowed, retry_after = domain_rate_limiter.hit(
        key,
        max_requests=settings.DOMAIN_RATE_LIMIT_PER_MINUTE,
        window_seconds=settings.DOMAIN_RATE_LIMIT_WINDOW_SECONDS,
    )
    if not allowed:
        raise_api_error(
            code="RATE_LIMITED",
            message=f"Too many requests. Wait {retry_after} seconds and try again.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
