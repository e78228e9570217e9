import hashlib
from typing import Callable, Iterator

from urlshortener.core.exceptions import GenerationExhausted

# Hex digits of the SHA-256 digest kept as the base code (32 bits)
BASE_CODE_LENGTH = 8
MAX_PROBES = 1000


def compute_base_code(url: str) -> str:
    """Deterministic 8-character lowercase hex code for a normalized URL."""
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return digest[:BASE_CODE_LENGTH]


def probe_candidates(base_code: str, max_probes: int = MAX_PROBES) -> Iterator[str]:
    """Yield base_code, base_code + "1", base_code + "2", ... (max_probes candidates in total)."""
    if max_probes < 1:
        return
    yield base_code
    for suffix in range(1, max_probes):
        yield f"{base_code}{suffix}"


def resolve_unique(base_code: str, exists: Callable[[str], bool], max_probes: int = MAX_PROBES) -> str:
    """Return the first probe candidate for which `exists` reports False.

    Raises GenerationExhausted once max_probes candidates were all taken.
    """
    for candidate in probe_candidates(base_code, max_probes):
        if not exists(candidate):
            return candidate
    raise GenerationExhausted(base_code, max_probes)
