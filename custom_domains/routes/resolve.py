"""Host routing API for the edge proxy."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.database import get_session
from custom_domains.schemas.routing import RouteDecisionResponse
from custom_domains.services import request_router

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/resolve", response_model=RouteDecisionResponse)
async def resolve_route(
    host: str = Query(..., description="Host header of the inbound request"),
    path: str = Query("/", description="Request path"),
    db: AsyncSession = Depends(get_session),
) -> RouteDecisionResponse:
    """
    Decide how the edge should serve a request.

    **Actions:**
    - `pass_through`: Serve the path as-is (main domain, assets, API)
    - `profile`: Render `username`'s profile
    - `short_link`: Resolve `slug` for `username`
    - `redirect`: Send a 302 to `location` (custom domain root in redirect mode)
    - `not_found`: No tenant serves this host

    **Example:**
    ```
    GET /api/resolve?host=links.acme.com&path=/
    → {"action": "profile", "username": "acme", "custom_domain": "links.acme.com"}
    ```
    """
    decision = await request_router.route_request(db, host, path)

    if isinstance(decision, request_router.ProfileRoute):
        return RouteDecisionResponse(
            action="profile",
            username=decision.username,
            custom_domain=decision.custom_domain,
        )
    if isinstance(decision, request_router.ShortLinkRoute):
        return RouteDecisionResponse(
            action="short_link",
            username=decision.username,
            slug=decision.slug,
            custom_domain=decision.custom_domain,
        )
    if isinstance(decision, request_router.RedirectRoute):
        return RouteDecisionResponse(action="redirect", location=decision.url)
    if isinstance(decision, request_router.NotFoundRoute):
        return RouteDecisionResponse(action="not_found", reason=decision.reason)

    return RouteDecisionResponse(action="pass_through")
