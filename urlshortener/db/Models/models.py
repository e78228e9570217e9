from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class URLItem(Base):
    __tablename__ = "urls"

    # Store-assigned surrogate key, exposed as the record id
    id = Column(Integer, primary_key=True, autoincrement=True)

    # The unique index is the authoritative guard against concurrent probes
    # settling on the same code.
    short_code = Column(String(64), unique=True, index=True, nullable=False)

    # Not unique: an update may point a code at a URL that is already shortened.
    original_url = Column(String(2048), index=True, nullable=False)

    # Naive UTC timestamps
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=True, index=True)

    access_count = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<URLItem id={self.id} short_code={self.short_code!r}>"
