"""Tests for custom domain root path behavior."""

from custom_domains.models.domain_config import DomainConfig
from custom_domains.services.routing_policy import RedirectTo, ServeProfile, resolve


def _config(mode: str = "bio", url: str | None = None) -> DomainConfig:
    return DomainConfig(root_domain_mode=mode, root_domain_redirect_url=url)


class TestResolve:
    def test_redirect_mode_with_url_redirects_root(self):
        assert resolve(_config("redirect", "https://x.com"), "/") == RedirectTo("https://x.com")

    def test_bio_path_always_serves_profile(self):
        assert resolve(_config("redirect", "https://x.com"), "/bio") == ServeProfile()

    def test_redirect_mode_without_url_falls_back_to_profile(self):
        assert resolve(_config("redirect", None), "/") == ServeProfile()

    def test_redirect_mode_with_blank_url_falls_back_to_profile(self):
        assert resolve(_config("redirect", "   "), "/") == ServeProfile()

    def test_bio_mode_serves_profile(self):
        assert resolve(_config("bio", "https://x.com"), "/") == ServeProfile()

    def test_bio_mode_bio_path(self):
        assert resolve(_config("bio"), "/bio") == ServeProfile()
