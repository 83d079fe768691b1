"""Deployment status tracking for verified custom domains.

The platform that actually serves the domain (certificate issuance, edge
propagation) reports back out-of-band; this module only reads the persisted
status and applies that report. It never moves a domain backwards.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.config import settings
from custom_domains.models.domain_config import DeploymentStatus, DomainConfig
from custom_domains.services.domain_registry import get_config
from custom_domains.services.errors import NotFoundError
from custom_domains.utils.domain_validator import normalize_domain

logger = logging.getLogger(__name__)


@dataclass
class DeploymentStatusReport:
    """Current deployment status plus what the dashboard should tell the user."""

    status: DeploymentStatus
    stalled: bool
    elapsed_seconds: int | None
    message: str


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def build_report(config: DomainConfig, now: datetime | None = None) -> DeploymentStatusReport:
    """
    Describe a domain config's deployment state.

    Args:
        config: Domain configuration
        now: Current time (defaults to UTC now)

    Returns:
        DeploymentStatusReport; stalls are warnings, never failures
    """
    now = now or datetime.now(UTC)
    status = DeploymentStatus(config.deployment_status)

    elapsed: timedelta | None = None
    if config.deployment_status_changed_at is not None:
        elapsed = now - _as_utc(config.deployment_status_changed_at)

    elapsed_seconds = int(elapsed.total_seconds()) if elapsed is not None else None

    if status == DeploymentStatus.ACTIVE:
        return DeploymentStatusReport(
            status=status,
            stalled=False,
            elapsed_seconds=elapsed_seconds,
            message=f"{config.custom_domain} is live.",
        )

    if status == DeploymentStatus.PENDING:
        message = (
            "Waiting for DNS verification. Add the CNAME record, then run the check."
            if config.custom_domain
            else "No custom domain configured."
        )
        return DeploymentStatusReport(
            status=status,
            stalled=False,
            elapsed_seconds=elapsed_seconds,
            message=message,
        )

    stall_after = timedelta(minutes=settings.DEPLOYMENT_STALL_WARNING_MINUTES)
    give_up_after = timedelta(hours=settings.DEPLOYMENT_MAX_WAIT_HOURS)

    if elapsed is not None and elapsed >= give_up_after:
        message = (
            f"Deployment has taken more than {settings.DEPLOYMENT_MAX_WAIT_HOURS} hours. "
            "Re-check your CNAME record, then contact support if it is correct."
        )
        stalled = True
    elif elapsed is not None and elapsed >= stall_after:
        message = (
            "Deployment is taking longer than usual. This is not an error; "
            f"it can take up to {settings.DEPLOYMENT_MAX_WAIT_HOURS} hours. Check back later."
        )
        stalled = True
    else:
        message = (
            "Domain verified! Deployment in progress. This usually takes 10-40 minutes "
            f"(occasionally up to {settings.DEPLOYMENT_MAX_WAIT_HOURS} hours)."
        )
        stalled = False

    return DeploymentStatusReport(
        status=status,
        stalled=stalled,
        elapsed_seconds=elapsed_seconds,
        message=message,
    )


async def refresh_status(db: AsyncSession, account_id: UUID) -> DeploymentStatusReport:
    """
    Re-read the persisted deployment status for an account.

    Args:
        db: Database session
        account_id: Owning account

    Returns:
        DeploymentStatusReport for the dashboard
    """
    config = await get_config(db, account_id)
    await db.refresh(config)
    return build_report(config)


async def _advance_to_active(db: AsyncSession, config: DomainConfig) -> DomainConfig:
    if config.deployment_status != DeploymentStatus.DEPLOYING.value:
        logger.info(
            f"Ignoring activation for {config.custom_domain}: "
            f"status is {config.deployment_status}"
        )
        return config

    now = datetime.now(UTC)
    config.deployment_status = DeploymentStatus.ACTIVE.value
    config.deployment_status_changed_at = now
    config.updated_at = now

    await db.flush()
    await db.refresh(config)

    logger.info(f"Custom domain {config.custom_domain} is now active")
    return config


async def mark_active(db: AsyncSession, account_id: UUID) -> DomainConfig:
    """
    Record that the deployment platform finished deploying an account's domain.

    Only deploying -> active is applied; any other state is left alone.

    Args:
        db: Database session
        account_id: Owning account

    Returns:
        Current domain configuration
    """
    config = await get_config(db, account_id)
    return await _advance_to_active(db, config)


async def mark_active_by_domain(db: AsyncSession, domain: str) -> DomainConfig:
    """
    Record activation reported by domain name (webhook payloads carry the domain).

    Args:
        db: Database session
        domain: Custom domain that went live

    Returns:
        Current domain configuration

    Raises:
        NotFoundError: If no account has verified this domain
    """
    normalized = normalize_domain(domain)
    result = await db.execute(
        select(DomainConfig).where(
            DomainConfig.custom_domain == normalized,
            DomainConfig.domain_verified.is_(True),
        )
    )
    config = result.scalar_one_or_none()

    if config is None:
        raise NotFoundError(
            f"No verified account uses {normalized}. Verify the domain before activating it.",
            code="DOMAIN_NOT_FOUND",
        )

    return await _advance_to_active(db, config)
