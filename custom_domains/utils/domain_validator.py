"""Domain and redirect URL validation utilities."""

import re
from typing import Tuple
from urllib.parse import urlparse

# One label: alphanumeric, inner hyphens allowed, 1-63 chars
LABEL_REGEX = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

# Final label (TLD): alphabetic, at least 2 chars
TLD_REGEX = re.compile(r"^[a-z]{2,63}$")

ALLOWED_REDIRECT_SCHEMES = ("http", "https")


def normalize_domain(domain: str) -> str:
    """
    Normalize a domain for storage and comparison.

    Lowercases, trims whitespace and strips a single trailing root dot,
    so "Links.Acme.com." and "links.acme.com" compare equal.

    Args:
        domain: Raw domain string

    Returns:
        Normalized domain
    """
    domain = domain.strip().lower()
    if domain.endswith("."):
        domain = domain[:-1]
    return domain


def validate_domain(domain: str) -> Tuple[bool, str | None]:
    """
    Validate custom domain format.

    Args:
        domain: Domain to validate (normalized or raw)

    Returns:
        Tuple of (is_valid, error_message)
        If valid, error_message is None
    """
    if not domain or not domain.strip():
        return False, "Domain is required"

    domain = normalize_domain(domain)

    if len(domain) > 253:
        return False, "Domain is too long (max 253 characters)"

    if "://" in domain or "/" in domain:
        return False, "Enter a bare domain like links.example.com, without http:// or a path"

    if "@" in domain:
        return False, "Provide a domain, not an email address"

    labels = domain.split(".")
    if len(labels) < 2:
        return False, "Domain must contain at least one dot (e.g. example.com)"

    for label in labels[:-1]:
        if not LABEL_REGEX.match(label):
            return False, f"Invalid domain label '{label}'. Use letters, digits and hyphens only"

    if not TLD_REGEX.match(labels[-1]):
        return False, "Domain must end in a valid extension such as .com or .io"

    return True, None


def is_platform_domain(domain: str, app_domain: str) -> bool:
    """
    Check whether a domain is the platform's own domain or one of its subdomains.

    Args:
        domain: Normalized domain
        app_domain: Main application domain

    Returns:
        True if the domain belongs to the platform
    """
    app_domain = normalize_domain(app_domain)
    return domain == app_domain or domain.endswith(f".{app_domain}")


def validate_redirect_url(url: str) -> Tuple[bool, str | None]:
    """
    Validate a root-domain redirect target.

    Must be an absolute http(s) URL with a host.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not url.strip():
        return False, "Redirect URL is required"

    parsed = urlparse(url.strip())

    if parsed.scheme.lower() not in ALLOWED_REDIRECT_SCHEMES:
        return False, "Redirect URL must start with http:// or https://"

    if not parsed.netloc or not parsed.hostname:
        return False, "Redirect URL must include a host (e.g. https://example.com)"

    return True, None
