"""Lookup and uniqueness queries over persisted domain configuration."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.models.account import Account
from custom_domains.models.domain_config import DomainConfig
from custom_domains.services.errors import NotFoundError
from custom_domains.utils.domain_validator import normalize_domain

logger = logging.getLogger(__name__)


async def get_account(db: AsyncSession, account_id: UUID) -> Account:
    """
    Load an account.

    Args:
        db: Database session
        account_id: Account to load

    Returns:
        The account

    Raises:
        NotFoundError: If no such account exists
    """
    account = await db.get(Account, account_id)
    if account is None:
        raise NotFoundError(f"Account {account_id} not found. Sign in again and retry.")
    return account


async def get_config(db: AsyncSession, account_id: UUID) -> DomainConfig:
    """
    Get an account's domain configuration, creating it with defaults if missing.

    Args:
        db: Database session
        account_id: Owning account

    Returns:
        The account's DomainConfig row

    Raises:
        NotFoundError: If the account does not exist
    """
    config = await db.get(DomainConfig, account_id)
    if config is not None:
        return config

    await get_account(db, account_id)

    config = DomainConfig(account_id=account_id)
    db.add(config)
    await db.flush()
    await db.refresh(config)

    logger.info(f"Created default domain config for account {account_id}")
    return config


async def get_verified_owner(db: AsyncSession, domain: str) -> UUID | None:
    """
    Find the account currently holding a domain verified.

    Args:
        db: Database session
        domain: Domain to look up (any case, optional trailing dot)

    Returns:
        Owning account ID, or None if nobody has verified it
    """
    result = await db.execute(
        select(DomainConfig.account_id).where(
            DomainConfig.custom_domain == normalize_domain(domain),
            DomainConfig.domain_verified.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def is_domain_available(
    db: AsyncSession,
    domain: str,
    account_id: UUID | None = None,
) -> bool:
    """
    Check whether a domain can be claimed.

    Args:
        db: Database session
        domain: Domain to check
        account_id: The claiming account; its own verified domain counts as available

    Returns:
        True if no other account holds the domain verified
    """
    owner = await get_verified_owner(db, domain)
    return owner is None or owner == account_id


async def get_account_by_domain(
    db: AsyncSession,
    domain: str,
) -> tuple[Account, DomainConfig] | None:
    """
    Resolve a verified custom domain to its tenant.

    Args:
        db: Database session
        domain: Request host already classified as a custom domain

    Returns:
        Tuple of (account, domain config), or None if the domain is unknown
        or not yet verified
    """
    result = await db.execute(
        select(Account, DomainConfig)
        .join(DomainConfig, DomainConfig.account_id == Account.id)
        .where(
            DomainConfig.custom_domain == normalize_domain(domain),
            DomainConfig.domain_verified.is_(True),
        )
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1]


async def get_account_by_subdomain(db: AsyncSession, label: str) -> Account | None:
    """
    Resolve a platform subdomain label to its tenant.

    Args:
        db: Database session
        label: Subdomain label (e.g. "alice")

    Returns:
        The account, or None if unknown
    """
    result = await db.execute(
        select(Account).where(Account.subdomain == label.lower())
    )
    return result.scalar_one_or_none()
