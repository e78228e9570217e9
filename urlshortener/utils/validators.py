"""URL normalization and validation for shorten and update requests."""

from typing import Optional

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from urlshortener.core.exceptions import ValidationError

MAX_URL_LENGTH = 2048

_http_url = TypeAdapter(HttpUrl)


def normalize_url(url: Optional[str]) -> str:
    """Trim surrounding whitespace. Nothing else is canonicalized."""
    if url is None:
        return ""
    return url.strip()


def validate_url(url: Optional[str]) -> str:
    """Validate a submitted URL and return its trimmed form.

    HttpUrl is only used to check the input; its normalized rendering
    (added trailing slash, lowercased host) is never stored.

    Raises:
        ValidationError: with reason empty, too_long, malformed or unsupported_scheme.
    """
    clean_url = normalize_url(url)
    if not clean_url:
        raise ValidationError("empty", "URL cannot be null or empty")

    if len(clean_url) > MAX_URL_LENGTH:
        raise ValidationError("too_long", f"URL is too long (maximum {MAX_URL_LENGTH} characters)")

    # HttpUrl would silently percent-encode these
    if any(ch.isspace() or ord(ch) < 0x20 for ch in clean_url):
        raise ValidationError("malformed", "Invalid URL format: contains whitespace or control characters")

    try:
        _http_url.validate_python(clean_url)
    except PydanticValidationError as e:
        error = e.errors()[0]
        if error["type"] == "url_scheme":
            raise ValidationError("unsupported_scheme", "Only HTTP and HTTPS URLs are supported")
        raise ValidationError("malformed", f"Invalid URL format: {error['msg']}")

    return clean_url
