"""Domain-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from custom_domains.models.domain_config import DeploymentStatus, RootDomainMode


class DomainRequest(BaseModel):
    """Request schema carrying a single domain name."""

    domain: str = Field(..., description="Domain name (e.g., links.example.com)")

    @field_validator("domain")
    @classmethod
    def strip_domain(cls, v: str) -> str:
        """Trim surrounding whitespace; format is validated by the service."""
        return v.strip()


class CheckDomainResponse(BaseModel):
    """Response for domain availability check."""

    domain: str
    available: bool


class DnsRecord(BaseModel):
    """A single DNS record the tenant must configure."""

    type: str = Field(..., description="DNS record type (CNAME)")
    name: str = Field(..., description="DNS record name/host")
    value: str = Field(..., description="DNS record value")


class DnsRecordStatus(BaseModel):
    """A required DNS record and what verification found."""

    model_config = ConfigDict(from_attributes=True)

    type: str
    name: str
    expected_value: str
    found: bool
    current_value: str | None = None


class DomainConfigItem(BaseModel):
    """Current custom domain configuration for the account."""

    model_config = ConfigDict(from_attributes=True)

    custom_domain: str | None
    domain_verified: bool
    deployment_status: DeploymentStatus
    use_domain_for_shortlinks: bool
    root_domain_mode: RootDomainMode
    root_domain_redirect_url: str | None
    verified_at: datetime | None


class DomainConfigResponse(BaseModel):
    """Response for operations that change the domain configuration."""

    ok: bool = True
    config: DomainConfigItem


class DomainOverviewResponse(BaseModel):
    """Response for the domain settings overview."""

    config: DomainConfigItem
    setup_step: Literal["enter_domain", "configuring_dns", "deploying", "active"]
    dns_records: list[DnsRecord]


class VerifyDomainResponse(BaseModel):
    """Response for a DNS verification attempt."""

    verified: bool
    records: list[DnsRecordStatus]
    message: str
    retryable: bool = Field(
        ...,
        description="True when the lookup itself failed and should be retried soon",
    )
    deployment_status: DeploymentStatus


class DeleteDomainResponse(BaseModel):
    """Response for domain removal."""

    ok: bool = True


class UpdateDomainConfigRequest(BaseModel):
    """Partial update of the domain configuration; omitted fields are left alone."""

    use_domain_for_shortlinks: bool | None = None
    root_domain_mode: RootDomainMode | None = None
    root_domain_redirect_url: str | None = Field(
        default=None,
        description="Absolute http(s) URL; send null or empty to clear",
    )


class DeploymentStatusResponse(BaseModel):
    """Response for deployment status polling."""

    status: DeploymentStatus
    stalled: bool
    elapsed_seconds: int | None
    message: str


class DeploymentWebhookRequest(BaseModel):
    """Notification from the deployment platform that a domain went live."""

    domain: str = Field(..., description="Custom domain that finished deploying")
    status: Literal["active"] = "active"
