"""Custom domain lifecycle: save, verify, configure and remove."""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.config import settings
from custom_domains.models.account import Account
from custom_domains.models.domain_config import DeploymentStatus, DomainConfig, RootDomainMode
from custom_domains.schemas.domain import DnsRecord
from custom_domains.services.dns_verifier import VerificationResult, dns_verifier
from custom_domains.services.domain_registry import (
    get_account,
    get_config,
    get_verified_owner,
    is_domain_available,
)
from custom_domains.services.errors import (
    ConflictError,
    FeatureNotAvailableError,
    ValidationError,
)
from custom_domains.utils.domain_validator import (
    is_platform_domain,
    normalize_domain,
    validate_domain,
    validate_redirect_url,
)

logger = logging.getLogger(__name__)

CONFIG_FIELDS = ("use_domain_for_shortlinks", "root_domain_mode", "root_domain_redirect_url")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _validated_domain(domain: str) -> str:
    """Validate and normalize a tenant-supplied domain, or raise ValidationError."""
    is_valid, error = validate_domain(domain)
    if not is_valid:
        raise ValidationError(error)

    normalized = normalize_domain(domain)
    if is_platform_domain(normalized, settings.APP_DOMAIN):
        raise ValidationError(
            f"{normalized} belongs to {settings.APP_DOMAIN}. Enter a domain you own instead."
        )
    return normalized


async def _require_custom_domain_feature(db: AsyncSession, account_id: UUID) -> Account:
    """Enforce the subscription gate for custom domains."""
    account = await get_account(db, account_id)
    if account.subscription_tier.lower() not in settings.pro_tiers_list:
        raise FeatureNotAvailableError(
            "Custom domains require a Pro subscription. Upgrade your plan to continue."
        )
    return account


def _set_deployment_status(config: DomainConfig, status: DeploymentStatus) -> None:
    if config.deployment_status != status.value:
        config.deployment_status = status.value
        config.deployment_status_changed_at = _utc_now()


def build_dns_records(config: DomainConfig) -> list[DnsRecord]:
    """
    Build the DNS records the tenant must add for their custom domain.

    Args:
        config: Domain configuration

    Returns:
        List of DNS records to configure (empty if no domain is saved)
    """
    if not config.custom_domain:
        return []

    return [
        DnsRecord(
            type="CNAME",
            name=config.custom_domain,
            value=settings.cname_target,
        )
    ]


def setup_step(config: DomainConfig) -> str:
    """
    Derive the dashboard setup step from persisted state.

    enter_domain -> configuring_dns -> deploying -> active

    A saved domain stays on configuring_dns until its CNAME verifies.
    """
    if not config.custom_domain:
        return "enter_domain"
    if not config.domain_verified:
        return "configuring_dns"
    if config.deployment_status != DeploymentStatus.ACTIVE.value:
        return "deploying"
    return "active"


async def check_domain_availability(
    db: AsyncSession,
    domain: str,
    account_id: UUID | None = None,
) -> bool:
    """
    Check whether a domain can be claimed.

    Args:
        db: Database session
        domain: Domain to check
        account_id: Asking account (its own verified domain counts as available)

    Returns:
        True if no other account has verified the domain

    Raises:
        ValidationError: If the domain is malformed
    """
    normalized = _validated_domain(domain)
    return await is_domain_available(db, normalized, account_id)


async def save_domain(db: AsyncSession, account_id: UUID, domain: str) -> DomainConfig:
    """
    Save a custom domain for an account.

    Always resets verification and deployment, even when re-saving the same domain.

    Args:
        db: Database session
        account_id: Owning account
        domain: Domain to save

    Returns:
        Updated domain configuration

    Raises:
        ValidationError: If the domain is malformed or belongs to the platform
        FeatureNotAvailableError: If the account's tier excludes custom domains
        ConflictError: If another account has verified the domain
    """
    normalized = _validated_domain(domain)
    await _require_custom_domain_feature(db, account_id)

    if not await is_domain_available(db, normalized, account_id):
        logger.info(f"Account {account_id} tried to claim {normalized}, already verified elsewhere")
        raise ConflictError(
            f"{normalized} is already connected to another account. "
            f"Use a different domain or contact support if you own it."
        )

    config = await get_config(db, account_id)

    config.custom_domain = normalized
    config.domain_verified = False
    config.verified_at = None
    _set_deployment_status(config, DeploymentStatus.PENDING)
    config.updated_at = _utc_now()

    await db.flush()
    await db.refresh(config)

    logger.info(f"Custom domain {normalized} saved for account {account_id}")
    return config


async def verify_domain(
    db: AsyncSession,
    account_id: UUID,
) -> tuple[VerificationResult, DomainConfig]:
    """
    Check the account's custom domain DNS and record a successful verification.

    Monotonic and idempotent: a verified domain stays verified, and
    deployment advances pending -> deploying at most once. A negative
    result leaves persisted state untouched.

    Args:
        db: Database session
        account_id: Owning account

    Returns:
        Tuple of (verification result, current domain configuration)

    Raises:
        FeatureNotAvailableError: If the account's tier excludes custom domains
        ValidationError: If no custom domain is saved
        ConflictError: If another account verified the domain first
    """
    await _require_custom_domain_feature(db, account_id)
    config = await get_config(db, account_id)

    if not config.custom_domain:
        raise ValidationError(
            "No custom domain configured. Save a domain before verifying it.",
            code="NO_CUSTOM_DOMAIN",
        )

    domain = config.custom_domain
    result = await dns_verifier.verify(domain, settings.cname_target)

    if not result.verified:
        logger.info(f"Domain {domain} not verified yet for account {account_id}: {result.message}")
        return result, config

    owner = await get_verified_owner(db, domain)
    if owner is not None and owner != account_id:
        raise ConflictError(
            f"{domain} was verified by another account. "
            f"Use a different domain or contact support if you own it."
        )

    now = _utc_now()
    # Conditional on the domain still being the one we looked up, so a
    # concurrent save of a different domain is never marked verified.
    try:
        marked = await db.execute(
            update(DomainConfig)
            .where(
                DomainConfig.account_id == account_id,
                DomainConfig.custom_domain == domain,
            )
            .values(
                domain_verified=True,
                verified_at=func.coalesce(DomainConfig.verified_at, now),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            update(DomainConfig)
            .where(
                DomainConfig.account_id == account_id,
                DomainConfig.custom_domain == domain,
                DomainConfig.deployment_status == DeploymentStatus.PENDING.value,
            )
            .values(
                deployment_status=DeploymentStatus.DEPLOYING.value,
                deployment_status_changed_at=now,
            )
            .execution_options(synchronize_session=False)
        )
    except IntegrityError:
        raise ConflictError(
            f"{domain} was verified by another account. "
            f"Use a different domain or contact support if you own it."
        )

    await db.refresh(config)

    if marked.rowcount == 0:
        logger.info(f"Domain for account {account_id} changed during verification of {domain}")
        result = VerificationResult(
            verified=False,
            records=result.records,
            message="Your domain changed while we were checking it. Run the check again.",
        )
        return result, config

    logger.info(
        f"Domain {domain} verified for account {account_id}, "
        f"deployment={config.deployment_status}"
    )
    return result, config


async def update_domain_config(
    db: AsyncSession,
    account_id: UUID,
    updates: dict[str, Any],
) -> DomainConfig:
    """
    Apply independent configuration setters together.

    Everything is validated before anything is written. Keys left out of
    ``updates`` are not touched; a None/empty redirect URL clears it.

    Args:
        db: Database session
        account_id: Owning account
        updates: Subset of use_domain_for_shortlinks, root_domain_mode,
            root_domain_redirect_url

    Returns:
        Updated domain configuration

    Raises:
        ValidationError: If the mode or redirect URL is invalid
    """
    unknown = set(updates) - set(CONFIG_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}

    if "use_domain_for_shortlinks" in updates:
        value = updates["use_domain_for_shortlinks"]
        if value is None:
            raise ValidationError("use_domain_for_shortlinks must be true or false")
        values["use_domain_for_shortlinks"] = bool(value)

    if "root_domain_mode" in updates:
        try:
            mode = RootDomainMode(updates["root_domain_mode"])
        except ValueError:
            raise ValidationError(
                "Root domain mode must be 'bio' or 'redirect'",
                code="INVALID_ROOT_DOMAIN_MODE",
            )
        values["root_domain_mode"] = mode.value

    if "root_domain_redirect_url" in updates:
        url = updates["root_domain_redirect_url"]
        if url is None or not str(url).strip():
            values["root_domain_redirect_url"] = None
        else:
            url = str(url).strip()
            is_valid, error = validate_redirect_url(url)
            if not is_valid:
                raise ValidationError(error, code="INVALID_REDIRECT_URL")
            values["root_domain_redirect_url"] = url

    config = await get_config(db, account_id)

    for name, value in values.items():
        setattr(config, name, value)
    if values:
        config.updated_at = _utc_now()

    await db.flush()
    await db.refresh(config)

    logger.info(f"Domain config updated for account {account_id}: {sorted(values)}")
    return config


async def set_use_domain_for_shortlinks(
    db: AsyncSession, account_id: UUID, value: bool
) -> DomainConfig:
    """Choose whether short links are served from the custom domain."""
    return await update_domain_config(db, account_id, {"use_domain_for_shortlinks": value})


async def set_root_domain_mode(
    db: AsyncSession, account_id: UUID, mode: RootDomainMode | str
) -> DomainConfig:
    """Set root path behavior. Redirect mode takes effect once a URL is saved."""
    return await update_domain_config(db, account_id, {"root_domain_mode": mode})


async def set_root_domain_redirect_url(
    db: AsyncSession, account_id: UUID, url: str | None
) -> DomainConfig:
    """Set (or clear, with None) the root redirect target."""
    return await update_domain_config(db, account_id, {"root_domain_redirect_url": url})


async def delete_domain(db: AsyncSession, account_id: UUID) -> DomainConfig:
    """
    Remove the custom domain by resetting every setting to its default.

    The row itself is kept; nothing is hard-deleted.

    Args:
        db: Database session
        account_id: Owning account

    Returns:
        The reset domain configuration
    """
    config = await get_config(db, account_id)
    previous = config.custom_domain

    config.custom_domain = None
    config.domain_verified = False
    config.verified_at = None
    _set_deployment_status(config, DeploymentStatus.PENDING)
    config.use_domain_for_shortlinks = True
    config.root_domain_mode = RootDomainMode.BIO.value
    config.root_domain_redirect_url = None
    config.updated_at = _utc_now()

    await db.flush()
    await db.refresh(config)

    logger.info(f"Custom domain {previous} removed from account {account_id}")
    return config
