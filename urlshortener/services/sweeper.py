import asyncio
import logging

from urlshortener.db.repository import URLRepository
from urlshortener.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically deletes expired rows.

    An optimization only: reads still check expiry themselves.
    """

    def __init__(self, session_factory, interval_seconds: int, clock=utcnow):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.clock = clock

    def sweep_once(self) -> int:
        db = self.session_factory()
        try:
            deleted = URLRepository(db).delete_expired(self.clock())
        finally:
            db.close()
        if deleted:
            logger.info("Expiry sweep removed %d record(s)", deleted)
        return deleted

    async def run(self):
        logger.info("Expiry sweeper started, interval=%ss", self.interval_seconds)
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await asyncio.to_thread(self.sweep_once)
            except Exception:
                logger.exception("Expiry sweep failed")
