"""Tests for domain and redirect URL validation utilities."""

from custom_domains.utils.domain_validator import (
    is_platform_domain,
    normalize_domain,
    validate_domain,
    validate_redirect_url,
)


class TestNormalizeDomain:
    def test_lowercases(self):
        assert normalize_domain("Links.ACME.com") == "links.acme.com"

    def test_strips_single_trailing_dot(self):
        assert normalize_domain("links.acme.com.") == "links.acme.com"

    def test_strips_whitespace(self):
        assert normalize_domain("  links.acme.com  ") == "links.acme.com"


class TestValidateDomain:
    def test_valid_subdomain(self):
        is_valid, error = validate_domain("links.acme.com")
        assert is_valid is True
        assert error is None

    def test_valid_apex(self):
        is_valid, error = validate_domain("mycompany.io")
        assert is_valid is True

    def test_valid_hyphenated_label(self):
        is_valid, error = validate_domain("my-links.acme.co.uk")
        assert is_valid is True

    def test_valid_with_trailing_dot(self):
        is_valid, error = validate_domain("links.acme.com.")
        assert is_valid is True

    def test_empty(self):
        is_valid, error = validate_domain("")
        assert is_valid is False
        assert "required" in error.lower()

    def test_no_dot(self):
        is_valid, error = validate_domain("localhost")
        assert is_valid is False
        assert "dot" in error.lower()

    def test_numeric_tld(self):
        is_valid, error = validate_domain("10.0.0.1")
        assert is_valid is False
        assert "extension" in error.lower()

    def test_single_letter_tld(self):
        is_valid, error = validate_domain("acme.c")
        assert is_valid is False

    def test_url_rejected(self):
        is_valid, error = validate_domain("https://links.acme.com")
        assert is_valid is False
        assert "http" in error.lower()

    def test_email_rejected(self):
        is_valid, error = validate_domain("me@acme.com")
        assert is_valid is False
        assert "email" in error.lower()

    def test_leading_hyphen_label(self):
        is_valid, error = validate_domain("-links.acme.com")
        assert is_valid is False
        assert "label" in error.lower()

    def test_consecutive_dots(self):
        is_valid, error = validate_domain("links..acme.com")
        assert is_valid is False

    def test_too_long(self):
        is_valid, error = validate_domain(("a" * 60 + ".") * 5 + "com")
        assert is_valid is False
        assert "too long" in error.lower()


class TestIsPlatformDomain:
    def test_app_domain(self):
        assert is_platform_domain("linkpop.space", "linkpop.space") is True

    def test_app_subdomain(self):
        assert is_platform_domain("alice.linkpop.space", "linkpop.space") is True

    def test_other_domain(self):
        assert is_platform_domain("notlinkpop.space", "linkpop.space") is False


class TestValidateRedirectUrl:
    def test_https_url(self):
        is_valid, error = validate_redirect_url("https://acme.com/store")
        assert is_valid is True
        assert error is None

    def test_http_url(self):
        is_valid, error = validate_redirect_url("http://acme.com")
        assert is_valid is True

    def test_missing_scheme(self):
        is_valid, error = validate_redirect_url("acme.com")
        assert is_valid is False
        assert "http" in error.lower()

    def test_javascript_scheme(self):
        is_valid, error = validate_redirect_url("javascript:alert(1)")
        assert is_valid is False

    def test_missing_host(self):
        is_valid, error = validate_redirect_url("https://")
        assert is_valid is False
        assert "host" in error.lower()

    def test_empty(self):
        is_valid, error = validate_redirect_url("  ")
        assert is_valid is False
        assert "required" in error.lower()
