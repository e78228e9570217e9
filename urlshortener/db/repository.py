from datetime import datetime
from typing import Optional
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from urlshortener.core.exceptions import ShortCodeConflictError, StoreError
from urlshortener.db.Models.models import URLItem

logger = logging.getLogger(__name__)


class URLRepository:
    """Record store for URLItem rows backed by a SQLAlchemy session.

    Failures other than a short_code uniqueness conflict are rolled back and
    re-raised as StoreError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, e: SQLAlchemyError):
        self.db.rollback()
        logger.error("Store failure during %s: %s", action, e)
        raise StoreError(f"Store failure during {action}") from e

    def get_by_short_code(self, short_code: str) -> Optional[URLItem]:
        try:
            return self.db.query(URLItem).filter(URLItem.short_code == short_code).first()
        except SQLAlchemyError as e:
            self._fail("lookup by short code", e)

    def get_by_original_url(self, original_url: str) -> Optional[URLItem]:
        try:
            return (
                self.db.query(URLItem)
                .filter(URLItem.original_url == original_url)
                .order_by(URLItem.id)
                .first()
            )
        except SQLAlchemyError as e:
            self._fail("lookup by original url", e)

    def exists(self, short_code: str) -> bool:
        try:
            return self.db.query(URLItem.id).filter(URLItem.short_code == short_code).first() is not None
        except SQLAlchemyError as e:
            self._fail("existence check", e)

    def save(self, db_url: URLItem) -> URLItem:
        """Insert or update; the id is assigned on first insert."""
        try:
            self.db.add(db_url)
            self.db.commit()
            self.db.refresh(db_url)
            return db_url
        except IntegrityError as e:
            self.db.rollback()
            error_msg = str(e.orig).lower() if getattr(e, "orig", None) is not None else str(e).lower()
            if "short_code" in error_msg or "unique" in error_msg:
                logger.warning(
                    "IntegrityError saving URLItem short_code=%s original=%s: %s",
                    db_url.short_code, db_url.original_url[:50], error_msg
                )
                raise ShortCodeConflictError(db_url.short_code) from e
            self._fail("save", e)
        except SQLAlchemyError as e:
            self._fail("save", e)

    def delete(self, db_url: URLItem) -> None:
        try:
            self.db.delete(db_url)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("delete", e)

    def delete_by_short_code(self, short_code: str) -> int:
        try:
            deleted = self.db.query(URLItem).filter(URLItem.short_code == short_code).delete(
                synchronize_session=False
            )
            self.db.commit()
            return deleted
        except SQLAlchemyError as e:
            self._fail("delete by short code", e)

    def increment_access(self, short_code: str, now: datetime) -> int:
        """Atomically bump access_count of a live record. Returns rows affected."""
        try:
            updated = (
                self.db.query(URLItem)
                .filter(
                    URLItem.short_code == short_code,
                    or_(URLItem.expires_at.is_(None), URLItem.expires_at >= now),
                )
                .update({URLItem.access_count: URLItem.access_count + 1}, synchronize_session=False)
            )
            self.db.commit()
            return updated
        except SQLAlchemyError as e:
            self._fail("access count increment", e)

    def delete_expired(self, now: datetime) -> int:
        try:
            deleted = (
                self.db.query(URLItem)
                .filter(URLItem.expires_at.isnot(None), URLItem.expires_at < now)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return deleted
        except SQLAlchemyError as e:
            self._fail("expired sweep", e)
