import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from urlshortener.core.exceptions import (
    GenerationExhausted,
    NotFoundError,
    ShortCodeConflictError,
)
from urlshortener.db.Models.models import URLItem
from urlshortener.db.repository import URLRepository
from urlshortener.services.lifecycle import LifecycleManager, TouchResult
from urlshortener.services.RedisURLCache import RedisURLCache
from urlshortener.utils.encoding import MAX_PROBES, compute_base_code, resolve_unique
from urlshortener.utils.timeutils import utcnow
from urlshortener.utils.validators import validate_url


logger = logging.getLogger(__name__)


class URLService:
    """Orchestrates validation, code generation, expiry and persistence.

    Every lookup runs the lazy expiry check: an expired record is deleted on
    sight and reported as not found.
    """

    def __init__(
        self,
        repository: URLRepository,
        lifecycle: Optional[LifecycleManager] = None,
        cache: Optional[RedisURLCache] = None,
        base_url: str = "http://localhost:8080",
        max_probes: int = MAX_PROBES,
        max_insert_retries: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.lifecycle = lifecycle or LifecycleManager()
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.max_probes = max_probes
        self.max_insert_retries = max_insert_retries
        self.clock = clock

    def short_url(self, short_code: str) -> str:
        return f"{self.base_url}/api/{short_code}"

    def _evict(self, short_code: str):
        if self.cache is not None:
            self.cache.evict(short_code)

    def _remove_expired(self, db_url: URLItem):
        short_code = db_url.short_code
        logger.info("URL has expired for short code: %s, deleting", short_code)
        self.repository.delete(db_url)
        self._evict(short_code)

    def _get_live(self, short_code: str, now: datetime) -> URLItem:
        db_url = self.repository.get_by_short_code(short_code)
        if db_url is None:
            raise NotFoundError(short_code)
        if self.lifecycle.touch_on_read(db_url, now) is TouchResult.EXPIRED:
            self._remove_expired(db_url)
            raise NotFoundError(short_code)
        return db_url

    def _find_live_by_original(self, original_url: str, now: datetime) -> Optional[URLItem]:
        # More than one row can carry the same URL after updates; drain expired ones.
        existing = self.repository.get_by_original_url(original_url)
        while existing is not None and self.lifecycle.is_expired(existing, now):
            self._remove_expired(existing)
            existing = self.repository.get_by_original_url(original_url)
        return existing

    def _insert_new(self, original_url: str, now: datetime) -> Tuple[URLItem, bool]:
        base_code = compute_base_code(original_url)
        rejected = set()

        def taken(candidate: str) -> bool:
            return candidate in rejected or self.repository.exists(candidate)

        for attempt in range(self.max_insert_retries + 1):
            try:
                short_code = resolve_unique(base_code, taken, self.max_probes)
            except GenerationExhausted:
                logger.error(
                    "Capacity anomaly: probe cap %d reached for base code %s (url=%s)",
                    self.max_probes, base_code, original_url[:50]
                )
                raise

            db_url = URLItem(
                original_url=original_url,
                short_code=short_code,
                created_at=now,
                updated_at=now,
                expires_at=self.lifecycle.compute_expiry(now),
                access_count=0,
            )
            try:
                return self.repository.save(db_url), True
            except ShortCodeConflictError:
                rejected.add(short_code)
                # A concurrent create of the same URL may have won the race.
                existing = self._find_live_by_original(original_url, now)
                if existing is not None:
                    logger.info("Concurrent create for %s resolved to %s", original_url[:50], existing.short_code)
                    return existing, False
                logger.warning(
                    "Short code collision on insert attempt %d/%d: %s",
                    attempt + 1, self.max_insert_retries + 1, short_code
                )

        logger.error("Capacity anomaly: insert retries exhausted for base code %s", base_code)
        raise GenerationExhausted(base_code, len(rejected))

    def create_short_url(self, raw_url: Optional[str]) -> Tuple[URLItem, bool]:
        """Shorten a URL. Returns (record, created); created is False when a live record was reused."""
        original_url = validate_url(raw_url)
        now = self.clock()

        existing = self._find_live_by_original(original_url, now)
        if existing is not None:
            existing.updated_at = now
            saved = self.repository.save(existing)
            logger.info("short URL already existed : '%s' for URL: %s", saved.short_code, original_url[:50])
            return saved, False

        db_url, created = self._insert_new(original_url, now)
        if created:
            logger.info("Shortened %s... to %s", original_url[:50], db_url.short_code)
        return db_url, created

    def redirect(self, short_code: str) -> str:
        """Resolve a short code to its target and count the access."""
        now = self.clock()

        if self.cache is not None:
            cached_url = self.cache.get(short_code)
            if cached_url:
                if self.repository.increment_access(short_code, now):
                    return cached_url
                # Gone or expired in the store; fall through to the lazy-delete path.
                self.cache.evict(short_code)

        db_url = self._get_live(short_code, now)
        target = db_url.original_url
        seconds_left = self.lifecycle.seconds_left(db_url, now)

        if not self.repository.increment_access(short_code, now):
            raise NotFoundError(short_code)

        if self.cache is not None:
            self.cache.put(short_code, target, seconds_left)
        logger.info("Redirecting short code: %s -> %s", short_code, target[:50])
        return target

    def update_short_url(self, short_code: str, raw_url: Optional[str]) -> URLItem:
        """Point an existing live code at a new URL. expires_at is left as it was."""
        original_url = validate_url(raw_url)
        now = self.clock()

        db_url = self._get_live(short_code, now)
        db_url.original_url = original_url
        db_url.updated_at = now
        saved = self.repository.save(db_url)
        self._evict(short_code)
        logger.info("Updated short code %s -> %s", short_code, original_url[:50])
        return saved

    def delete_short_url(self, short_code: str) -> None:
        db_url = self.repository.get_by_short_code(short_code)
        if db_url is None:
            raise NotFoundError(short_code)
        if self.lifecycle.is_expired(db_url, self.clock()):
            logger.info("URL already expired for short code: %s", short_code)

        self.repository.delete_by_short_code(short_code)
        self._evict(short_code)
        logger.info("Deleted short code: %s", short_code)

    def get_url_stats(self, short_code: str) -> URLItem:
        return self._get_live(short_code, self.clock())
