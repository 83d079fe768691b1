"""Root path behavior for custom domains."""

from dataclasses import dataclass
from typing import Protocol

from custom_domains.models.domain_config import RootDomainMode

# Always serves the profile, whatever the root mode
BIO_FALLBACK_PATH = "/bio"


class RootDomainSettings(Protocol):
    root_domain_mode: str
    root_domain_redirect_url: str | None


@dataclass(frozen=True)
class ServeProfile:
    """Serve the tenant's bio profile."""


@dataclass(frozen=True)
class RedirectTo:
    """Redirect the visitor elsewhere."""

    url: str


RootDecision = ServeProfile | RedirectTo


def resolve(config: RootDomainSettings, path: str) -> RootDecision:
    """
    Decide what a custom domain serves at the given root-level path.

    Rules, in order:
    1. /bio always serves the profile, so it is never unreachable.
    2. Redirect mode with a saved URL redirects there.
    3. Anything else (bio mode, or redirect mode with no URL yet) serves the profile.
    """
    if path == BIO_FALLBACK_PATH:
        return ServeProfile()

    url = (config.root_domain_redirect_url or "").strip()
    if config.root_domain_mode == RootDomainMode.REDIRECT.value and url:
        return RedirectTo(url=url)

    return ServeProfile()
