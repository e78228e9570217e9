import pytest

from urlshortener.core.exceptions import ValidationError
from urlshortener.utils.validators import MAX_URL_LENGTH, normalize_url, validate_url


@pytest.mark.parametrize("url", [
    "http://host",
    "https://host/path",
    "HTTPS://example.com/Mixed/Case",
    "http://127.0.0.1:8080/x?y=z#frag",
    "https://[::1]/ipv6",
    # Extra slashes after a special scheme are skipped; the host is "path-only"
    "http:///path-only",
])
def test_accepts_http_and_https(url):
    assert validate_url(url) == url


@pytest.mark.parametrize("url, reason", [
    (None, "empty"),
    ("", "empty"),
    (" \t\n", "empty"),
    ("example.com/path", "malformed"),
    ("ftp://host/path", "unsupported_scheme"),
    ("mailto:someone@example.com", "unsupported_scheme"),
    ("https://", "malformed"),
    ("https://exa mple.com", "malformed"),
    ("http://[::1/broken", "malformed"),
])
def test_rejects_invalid(url, reason):
    with pytest.raises(ValidationError) as exc_info:
        validate_url(url)
    assert exc_info.value.reason == reason


def test_length_boundary():
    prefix = "https://example.com/"
    at_limit = prefix + "x" * (MAX_URL_LENGTH - len(prefix))
    assert len(at_limit) == 2048
    assert validate_url(at_limit) == at_limit

    with pytest.raises(ValidationError) as exc_info:
        validate_url(at_limit + "x")
    assert exc_info.value.reason == "too_long"


def test_length_is_measured_after_trimming():
    prefix = "https://example.com/"
    at_limit = prefix + "x" * (MAX_URL_LENGTH - len(prefix))
    assert validate_url("   " + at_limit + "   ") == at_limit


def test_normalize_only_trims():
    assert normalize_url("  https://Example.com/A/?b=2&a=1  ") == "https://Example.com/A/?b=2&a=1"


def test_returns_input_rather_than_pydantic_rendering():
    # HttpUrl renders these as "http://host/" and "https://example.com/"
    assert validate_url("http://host") == "http://host"
    assert validate_url("HTTPS://EXAMPLE.com") == "HTTPS://EXAMPLE.com"
