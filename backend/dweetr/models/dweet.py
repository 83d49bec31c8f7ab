# dweetr/models/dweet.py

import json
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text

from dweetr.models.base import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in ``dweets.created_at``."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Dweet(Base):
    __tablename__ = "dweets"
    __table_args__ = (
        # Every read is "WHERE thing = ? ... ORDER BY id"
        Index("ix_dweets_thing_id", "thing", "id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    thing = Column(String(255), nullable=False)

    # Ordered key/value payload, stored as JSON text
    content = Column(Text, nullable=False)

    is_private = Column(Boolean, nullable=False, default=False)

    # Only set for private dweets; NULLs never collide
    token = Column(String(64), nullable=True, unique=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    @property
    def payload(self) -> dict:
        return json.loads(self.content)

    def __repr__(self):
        return f"<Dweet id={self.id} thing={self.thing!r} private={self.is_private}>"
