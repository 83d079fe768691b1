"""Webhook API routes for deployment platform callbacks."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.database import get_session
from custom_domains.dependencies import require_deployment_secret
from custom_domains.schemas.common import raise_api_error
from custom_domains.schemas.domain import DeploymentStatusResponse, DeploymentWebhookRequest
from custom_domains.services import deployment_service
from custom_domains.services.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/webhooks/deployment",
    response_model=DeploymentStatusResponse,
    dependencies=[Depends(require_deployment_secret)],
)
async def handle_deployment_webhook(
    request: DeploymentWebhookRequest,
    db: AsyncSession = Depends(get_session),
) -> DeploymentStatusResponse:
    """
    Record that the deployment platform finished serving a custom domain.

    Sent by the hosting platform (or a periodic activation check) once the
    certificate is issued and the edge answers for the domain.

    **Headers:**
    - `X-Deployment-Secret`: Shared webhook secret

    **State Transitions:**
    - `deploying → active`
    - Any other state is left unchanged (never downgrades `active`)
    """
    try:
        config = await deployment_service.mark_active_by_domain(db, request.domain)
    except NotFoundError as e:
        logger.warning(f"Deployment webhook for unknown domain {request.domain}")
        raise_api_error(code=e.code, message=e.message, status_code=e.status_code)

    report = deployment_service.build_report(config)

    return DeploymentStatusResponse(
        status=report.status,
        stalled=report.stalled,
        elapsed_seconds=report.elapsed_seconds,
        message=report.message,
    )
