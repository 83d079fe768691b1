"""Routing decision Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel


class RouteDecisionResponse(BaseModel):
    """How the edge proxy should serve a request."""

    action: Literal["pass_through", "profile", "short_link", "redirect", "not_found"]
    username: str | None = None
    slug: str | None = None
    custom_domain: str | None = None
    location: str | None = None
    reason: str | None = None
