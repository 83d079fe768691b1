"""SQLAlchemy models."""

from custom_domains.models.account import Account
from custom_domains.models.domain_config import DeploymentStatus, DomainConfig, RootDomainMode

__all__ = [
    "Account",
    "DomainConfig",
    "DeploymentStatus",
    "RootDomainMode",
]
