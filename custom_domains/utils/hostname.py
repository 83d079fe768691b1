"""Request host classification."""

from dataclasses import dataclass

from custom_domains.config import settings


@dataclass(frozen=True)
class Main:
    """The platform's own domain (or a dev/preview alias of it)."""


@dataclass(frozen=True)
class Subdomain:
    """A tenant subdomain of the platform domain."""

    label: str


@dataclass(frozen=True)
class Custom:
    """A candidate custom domain; still has to be resolved to a tenant."""

    domain: str


HostnameClassification = Main | Subdomain | Custom


def strip_port(host: str) -> str:
    """Remove a trailing :port, keeping bracketed IPv6 literals intact."""
    host = host.strip()
    if host.startswith("["):
        end = host.find("]")
        if end != -1:
            return host[1:end]
        return host
    # A bare IPv6 literal has several colons and no port
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def normalize_host(host: str) -> str:
    """Strip the port, lowercase and trim a trailing root dot."""
    host = strip_port(host).lower()
    if host.endswith("."):
        host = host[:-1]
    return host


def _is_dev_host(host: str, dev_aliases: list[str]) -> bool:
    return host in dev_aliases or host.endswith(".localhost")


def _is_preview_host(host: str, preview_suffixes: list[str]) -> bool:
    return any(host == suffix or host.endswith(f".{suffix}") for suffix in preview_suffixes)


def classify(
    host: str,
    app_domain: str,
    dev_aliases: list[str] | None = None,
    preview_suffixes: list[str] | None = None,
) -> HostnameClassification:
    """
    Classify an inbound request host into routing intent.

    Pure function: no I/O, safe to call from any request.

    Args:
        host: Raw Host header value (may include a port)
        app_domain: Main application domain (e.g. linkpop.space)
        dev_aliases: Hosts always treated as main (defaults from settings)
        preview_suffixes: Ephemeral preview host suffixes (defaults from settings)

    Returns:
        Main, Subdomain(label) or Custom(domain)

    Examples:
        classify("app.example.com", "example.com") -> Subdomain("app")
        classify("localhost:3000", "example.com") -> Main()
        classify("mycompany.io", "example.com") -> Custom("mycompany.io")
    """
    if dev_aliases is None:
        dev_aliases = settings.dev_host_aliases_list
    if preview_suffixes is None:
        preview_suffixes = settings.preview_host_suffixes_list

    host = normalize_host(host)
    app_domain = normalize_host(app_domain)

    if _is_dev_host(host, dev_aliases) or _is_preview_host(host, preview_suffixes):
        return Main()

    if host == app_domain:
        return Main()

    suffix = f".{app_domain}"
    if host.endswith(suffix):
        return Subdomain(label=host[: -len(suffix)])

    return Custom(domain=host)
