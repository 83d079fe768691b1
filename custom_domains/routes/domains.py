"""Custom domain API routes for the dashboard."""

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.database import get_session
from custom_domains.dependencies import get_current_account, rate_limit_domain_checks
from custom_domains.models.account import Account
from custom_domains.models.domain_config import DomainConfig
from custom_domains.schemas.common import raise_api_error
from custom_domains.schemas.domain import (
    CheckDomainResponse,
    DeleteDomainResponse,
    DeploymentStatusResponse,
    DnsRecordStatus,
    DomainConfigItem,
    DomainConfigResponse,
    DomainOverviewResponse,
    DomainRequest,
    UpdateDomainConfigRequest,
    VerifyDomainResponse,
)
from custom_domains.services import deployment_service, domain_service
from custom_domains.services.domain_registry import get_config
from custom_domains.services.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_domain_error(e: DomainError) -> NoReturn:
    raise_api_error(code=e.code, message=e.message, status_code=e.status_code)


def _config_response(config: DomainConfig) -> DomainConfigResponse:
    return DomainConfigResponse(config=DomainConfigItem.model_validate(config))


@router.get("/domains", response_model=DomainOverviewResponse)
async def get_domain_overview(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
) -> DomainOverviewResponse:
    """
    Get the account's custom domain settings.

    **Response:**
    - Current configuration
    - Derived setup step: `enter_domain` → `configuring_dns` → `deploying` → `active`
    - DNS records the tenant must add
    """
    config = await get_config(db, account.id)

    return DomainOverviewResponse(
        config=DomainConfigItem.model_validate(config),
        setup_step=domain_service.setup_step(config),
        dns_records=domain_service.build_dns_records(config),
    )


@router.post(
    "/domains/check",
    response_model=CheckDomainResponse,
    dependencies=[Depends(rate_limit_domain_checks)],
)
async def check_domain(
    request: DomainRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
) -> CheckDomainResponse:
    """
    Check whether a domain is free to connect.

    A domain is unavailable only once another account has verified it.

    **Errors:**
    - 429 `RATE_LIMITED`: More than the per-minute limit of checks from this client
    """
    try:
        available = await domain_service.check_domain_availability(
            db, request.domain, account.id
        )
    except DomainError as e:
        _raise_domain_error(e)

    return CheckDomainResponse(domain=request.domain, available=available)


@router.put("/domains", response_model=DomainConfigResponse)
async def save_domain(
    request: DomainRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
) -> DomainConfigResponse:
    """
    Save a custom domain for the account.

    **Request Body:**
    ```json
    { "domain": "links.acme.com" }
    ```

    Saving always resets verification; add the CNAME record and call
    `POST /domains/verify` next.

    **Errors:**
    - 400 `INVALID_DOMAIN`: Malformed domain
    - 403 `PRO_REQUIRED`: Plan does not include custom domains
    - 409 `DOMAIN_TAKEN`: Another account has verified this domain
    """
    try:
        config = await domain_service.save_domain(db, account.id, request.domain)
    except DomainError as e:
        _raise_domain_error(e)

    return _config_response(config)


@router.post(
    "/domains/verify",
    response_model=VerifyDomainResponse,
    dependencies=[Depends(rate_limit_domain_checks)],
)
async def verify_domain(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
) -> VerifyDomainResponse:
    """
    Check the account's custom domain DNS.

    A negative result is not an error: DNS may simply not have propagated
    yet (up to 48 hours). `retryable` is true when the lookup itself failed
    and the dashboard should retry shortly.

    **Expected DNS record:**
    ```
    links.acme.com  CNAME  linkpop.space
    ```

    **Errors:**
    - 429 `RATE_LIMITED`: More than the per-minute limit of verifications from this client
    """
    try:
        result, config = await domain_service.verify_domain(db, account.id)
    except DomainError as e:
        _raise_domain_error(e)

    return VerifyDomainResponse(
        verified=result.verified,
        records=[DnsRecordStatus.model_validate(r) for r in result.records],
        message=result.message,
        retryable=result.transient,
        deployment_status=config.deployment_status,
    )


@router.delete("/domains", response_model=DeleteDomainResponse)
async def delete_domain(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
) -> DeleteDomainResponse:
    """
    Remove the custom domain.

    Resets every custom domain setting to its default; the tenant's profile
    remains reachable on its platform subdomain.
    """
    try:
        await domain_service.delete_domain(db, account.id)
    except DomainError as e:
        _raise_domain_error(e)

    return DeleteDomainResponse(ok=True)


@router.patch("/domains/config", response_model=DomainConfigResponse)
async def update_domain_config(
    request: UpdateDomainConfigRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
) -> DomainConfigResponse:
    """
    Update custom domain options.

    **Request Body (all optional):**
    ```json
    {
      "use_domain_for_shortlinks": true,
      "root_domain_mode": "redirect",
      "root_domain_redirect_url": "https://acme.com"
    }
    ```

    `root_domain_mode: "redirect"` may be saved before the URL; the root
    keeps serving the profile until a URL is set. `/bio` always serves the
    profile.
    """
    updates = request.model_dump(exclude_unset=True)

    try:
        config = await domain_service.update_domain_config(db, account.id, updates)
    except DomainError as e:
        _raise_domain_error(e)

    return _config_response(config)


@router.get("/domains/deployment-status", response_model=DeploymentStatusResponse)
async def get_deployment_status(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
) -> DeploymentStatusResponse:
    """
    Get the deployment status of the verified custom domain.

    **Statuses:**
    - `pending`: Waiting for DNS verification
    - `deploying`: Verified; certificate and edge setup in progress
    - `active`: Live

    `stalled` is a warning only: deployment can take up to 48 hours.
    """
    report = await deployment_service.refresh_status(db, account.id)

    return DeploymentStatusResponse(
        status=report.status,
        stalled=report.stalled,
        elapsed_seconds=report.elapsed_seconds,
        message=report.message,
    )
