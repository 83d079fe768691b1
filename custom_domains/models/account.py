"""Account model (tenant identity, owned by the auth/billing collaborators)."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from custom_domains.database import Base


class Account(Base):
    """Represents a tenant account. Read-only from this service's point of view."""

    __tablename__ = "accounts"

    # Primary key
    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
    )

    # Platform subdomain label (e.g. "alice" for alice.linkpop.space)
    subdomain: Mapped[str | None] = mapped_column(
        String(63),
        unique=True,
        nullable=True,
    )

    # Subscription tier, consumed for the custom domain feature gate
    subscription_tier: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="free",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Account(username={self.username}, tier={self.subscription_tier})>"
