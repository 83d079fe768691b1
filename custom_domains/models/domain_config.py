"""Per-account custom domain configuration."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from custom_domains.database import Base


class DeploymentStatus(str, Enum):
    """Deployment lifecycle; only ever advances pending -> deploying -> active."""

    PENDING = "pending"
    DEPLOYING = "deploying"
    ACTIVE = "active"


class RootDomainMode(str, Enum):
    """What the root path of a custom domain serves."""

    BIO = "bio"
    REDIRECT = "redirect"


class DomainConfig(Base):
    """Custom domain settings for one tenant account."""

    __tablename__ = "domain_configs"
    __table_args__ = (
        # One verified owner per domain
        Index(
            "uq_domain_configs_verified_domain",
            "custom_domain",
            unique=True,
            postgresql_where=text("domain_verified"),
            sqlite_where=text("domain_verified = 1"),
        ),
        Index("ix_domain_configs_custom_domain", "custom_domain"),
    )

    # Primary key, one row per account
    account_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Normalized: lowercase, no trailing root dot
    custom_domain: Mapped[str | None] = mapped_column(String(253), nullable=True)

    domain_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    deployment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DeploymentStatus.PENDING.value,
    )

    use_domain_for_shortlinks: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    root_domain_mode: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RootDomainMode.BIO.value,
    )

    root_domain_redirect_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    deployment_status_changed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<DomainConfig(domain={self.custom_domain}, verified={self.domain_verified}, "
            f"deployment={self.deployment_status})>"
        )
