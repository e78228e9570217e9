"""Exceptions raised by the shortening core.

ValidationError and NotFoundError are expected outcomes of user input.
GenerationExhausted and StoreError signal server-side faults.
"""


class ShortenerError(Exception):
    """Base class for URL shortener errors."""

    pass


class ValidationError(ShortenerError):
    """Raised when a submitted URL is rejected.

    `reason` is one of: empty, too_long, malformed, unsupported_scheme.
    """

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class NotFoundError(ShortenerError):
    """Raised when a short code is unknown or has expired."""

    def __init__(self, short_code: str):
        super().__init__(f"Short code not found: {short_code}")
        self.short_code = short_code


class GenerationExhausted(ShortenerError):
    """Raised when no free short code was found within the probe cap."""

    def __init__(self, base_code: str, attempts: int):
        super().__init__(f"No free short code for base '{base_code}' after {attempts} attempts")
        self.base_code = base_code
        self.attempts = attempts


class StoreError(ShortenerError):
    """Raised when the record store fails or rejects a write."""

    pass


class ShortCodeConflictError(StoreError):
    """Raised when the unique index on short_code rejects an insert."""

    def __init__(self, short_code: str):
        super().__init__(f"Short code already taken: {short_code}")
        self.short_code = short_code
