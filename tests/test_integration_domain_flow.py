"""End-to-end custom domain flow: save, verify, deploy, route."""

from unittest.mock import patch

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from custom_domains.services.deployment_service import mark_active_by_domain, refresh_status
from custom_domains.services.dns_verifier import DNSVerifier
from custom_domains.services.domain_service import (
    save_domain,
    set_root_domain_mode,
    set_root_domain_redirect_url,
    verify_domain,
)
from custom_domains.services.request_router import (
    NotFoundRoute,
    ProfileRoute,
    RedirectRoute,
    route_request,
)


def _doh_verifier(cname_target: str | None) -> DNSVerifier:
    """Verifier backed by a fake DoH endpoint answering with one CNAME (or nothing)."""

    def handler(request: httpx.Request) -> httpx.Response:
        answers = []
        if cname_target and request.url.params["type"] == "CNAME":
            answers = [{"name": "links.acme.com.", "type": 5, "TTL": 300, "data": cname_target}]
        return httpx.Response(200, json={"Status": 0, "Answer": answers})

    return DNSVerifier(endpoint="https://dns.test/dns-query", transport=httpx.MockTransport(handler))


class TestCustomDomainFlow:
    async def test_full_lifecycle(self, db: AsyncSession, make_account):
        account = await make_account(username="acme", subdomain="acme")

        # Save
        config = await save_domain(db, account.id, "links.acme.com")
        assert config.deployment_status == "pending"

        # Not routed until verified
        decision = await route_request(db, "links.acme.com", "/")
        assert isinstance(decision, NotFoundRoute)

        # DNS not set up yet
        with patch(
            "custom_domains.services.domain_service.dns_verifier",
            _doh_verifier(None),
        ):
            result, config = await verify_domain(db, account.id)
        assert result.verified is False
        assert "not propagated yet" in result.message
        assert config.domain_verified is False

        # CNAME added
        with patch(
            "custom_domains.services.domain_service.dns_verifier",
            _doh_verifier("linkpop.space."),
        ):
            result, config = await verify_domain(db, account.id)
        assert result.verified is True
        assert config.domain_verified is True
        assert config.deployment_status == "deploying"

        report = await refresh_status(db, account.id)
        assert report.status.value == "deploying"
        assert report.stalled is False

        # Hosting platform reports the domain live
        await mark_active_by_domain(db, "links.acme.com")
        report = await refresh_status(db, account.id)
        assert report.status.value == "active"

        decision = await route_request(db, "links.acme.com", "/")
        assert decision == ProfileRoute(username="acme", custom_domain="links.acme.com")

    async def test_redirect_mode_takes_effect_after_url(self, db: AsyncSession, make_account):
        account = await make_account(username="acme")
        await save_domain(db, account.id, "links.acme.com")
        with patch(
            "custom_domains.services.domain_service.dns_verifier",
            _doh_verifier("linkpop.space"),
        ):
            await verify_domain(db, account.id)

        await set_root_domain_mode(db, account.id, "redirect")
        assert isinstance(await route_request(db, "links.acme.com", "/"), ProfileRoute)

        await set_root_domain_redirect_url(db, account.id, "https://acme.com")
        assert await route_request(db, "links.acme.com", "/") == RedirectRoute(url="https://acme.com")
        assert isinstance(await route_request(db, "links.acme.com", "/bio"), ProfileRoute)
