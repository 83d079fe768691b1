"""Per-request routing decisions for platform subdomains and custom domains."""

import logging
import re
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.config import settings
from custom_domains.services import routing_policy
from custom_domains.services.domain_registry import (
    get_account_by_domain,
    get_account_by_subdomain,
)
from custom_domains.utils.hostname import Main, Subdomain, classify

logger = logging.getLogger(__name__)

PASS_THROUGH_PREFIXES = ("/api/", "/_next/", "/static/")

ASSET_REGEX = re.compile(r"\.(ico|png|jpg|jpeg|svg|gif|webp|css|js|woff|woff2|ttf|eot|map)$")

# First path segments that can never be a short link slug
RESERVED_ROUTES = frozenset({
    # System routes
    "api", "auth", "admin", "dashboard", "settings",
    # Public routes
    "login", "signup", "register", "logout", "home", "about", "contact",
    "help", "support", "terms", "privacy", "pricing",
    # Analytics
    "insights", "analytics",
    # Technical routes
    "_next", "static", "public", "assets", "favicon", "robots", "sitemap", "manifest",
    # Protected keywords
    "profile", "account", "user", "users", "page", "pages", "post", "posts",
    "blog", "link", "links", "url", "urls", "s",
    "root", "system", "linkpop", "linkpop-app", "info", "test", "demo",
    # HTTP methods
    "get", "put", "patch", "delete",
})


@dataclass(frozen=True)
class PassThrough:
    """Let the application handle the path as-is."""


@dataclass(frozen=True)
class ProfileRoute:
    """Render the tenant's profile."""

    username: str
    custom_domain: str | None = None


@dataclass(frozen=True)
class ShortLinkRoute:
    """Resolve a short link slug owned by the tenant."""

    username: str
    slug: str
    custom_domain: str | None = None


@dataclass(frozen=True)
class RedirectRoute:
    """Redirect the visitor (custom domain root in redirect mode)."""

    url: str


@dataclass(frozen=True)
class NotFoundRoute:
    """No tenant serves this host."""

    reason: str


RouteDecision = PassThrough | ProfileRoute | ShortLinkRoute | RedirectRoute | NotFoundRoute


def is_reserved_route(segment: str) -> bool:
    """Check whether a first path segment is reserved by the application."""
    return segment.lower() in RESERVED_ROUTES


def _is_pass_through_path(path: str) -> bool:
    return path.startswith(PASS_THROUGH_PREFIXES) or ASSET_REGEX.search(path) is not None


def _single_slug(path: str) -> str | None:
    segments = [s for s in path.split("/") if s]
    if len(segments) == 1 and not is_reserved_route(segments[0]):
        return segments[0]
    return None


async def route_request(db: AsyncSession, host: str, path: str) -> RouteDecision:
    """
    Decide how to serve a request from its Host header and path.

    Args:
        db: Database session
        host: Raw Host header
        path: Request path (no query string)

    Returns:
        The routing decision for the edge proxy
    """
    path = path or "/"
    if not path.startswith("/"):
        path = f"/{path}"

    if _is_pass_through_path(path):
        return PassThrough()

    classification = classify(host, settings.APP_DOMAIN)

    if isinstance(classification, Main):
        return PassThrough()

    if isinstance(classification, Subdomain):
        account = await get_account_by_subdomain(db, classification.label)
        if account is None:
            logger.info(f"Unknown subdomain {classification.label}")
            return NotFoundRoute(reason="Profile not found")

        if path in ("/", routing_policy.BIO_FALLBACK_PATH):
            return ProfileRoute(username=account.username)

        slug = _single_slug(path)
        if slug:
            return ShortLinkRoute(username=account.username, slug=slug)
        return PassThrough()

    domain = classification.domain

    match = await get_account_by_domain(db, domain)
    if match is None:
        logger.info(f"Unknown or unverified custom domain {domain}")
        return NotFoundRoute(reason="Domain not found")

    account, config = match

    if path in ("/", routing_policy.BIO_FALLBACK_PATH):
        decision = routing_policy.resolve(config, path)
        if isinstance(decision, routing_policy.RedirectTo):
            logger.debug(f"Redirecting {domain} root to {decision.url}")
            return RedirectRoute(url=decision.url)
        return ProfileRoute(username=account.username, custom_domain=domain)

    slug = _single_slug(path)
    if slug:
        return ShortLinkRoute(username=account.username, slug=slug, custom_domain=domain)
    return PassThrough()
