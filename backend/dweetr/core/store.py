# dweetr/core/store.py

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterable, List, Mapping, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dweetr.core.access import VisibilityFilter
from dweetr.core.errors import StorageUnavailable
from dweetr.models.base import Base
from dweetr.models.dweet import Dweet, utcnow

logger = logging.getLogger(__name__)


class MessageStore:
    """
    Append-only dweet table with visibility-filtered, id-ordered reads.

    One instance is built at startup and shared by every request. Each call
    opens its own session, so the store is safe to use from many threads.
    Rows come back detached and fully loaded.
    """

    def __init__(self, engine: Engine, clock: Callable[[], datetime] = utcnow):
        self.engine = engine
        self.clock = clock
        self._session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @contextmanager
    def session(self):
        """
        Context manager for one unit of work.
        Usage:
            with store.session() as session:
                session.execute(...)
        """
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {type(e).__name__}: {e}")
            raise StorageUnavailable() from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Schema creation failed: {e}")
            raise StorageUnavailable() from e

    # -------------------------
    # Writes
    # -------------------------

    def append(
        self,
        thing: str,
        payload: Mapping[str, object],
        is_private: bool = False,
        token: Optional[str] = None,
    ) -> Dweet:
        dweet = Dweet(
            thing=thing,
            content=json.dumps(dict(payload)),
            is_private=is_private,
            token=token,
        )
        with self.session() as session:
            # Never stamp earlier than the thing's newest dweet, so id order
            # and created_at order agree even if the clock steps back
            newest = session.execute(
                select(func.max(Dweet.created_at)).where(Dweet.thing == thing)
            ).scalar()
            now = self.clock()
            dweet.created_at = max(now, newest) if newest is not None else now
            session.add(dweet)
            session.flush()
        return dweet

    def delete_older_than(self, thing: str, cutoff: datetime) -> int:
        with self.session() as session:
            result = session.execute(
                delete(Dweet).where(Dweet.thing == thing, Dweet.created_at < cutoff)
            )
            return result.rowcount or 0

    def delete_by_ids(self, ids: Iterable[int]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        with self.session() as session:
            result = session.execute(delete(Dweet).where(Dweet.id.in_(ids)))
            return result.rowcount or 0

    # -------------------------
    # Reads
    # -------------------------

    def latest(self, thing: str, visibility: VisibilityFilter) -> Optional[Dweet]:
        stmt = (
            select(Dweet)
            .where(Dweet.thing == thing, visibility.clause())
            .order_by(Dweet.id.desc())
            .limit(1)
        )
        with self.session() as session:
            return session.execute(stmt).scalars().first()

    def list_descending(self, thing: str, visibility: VisibilityFilter) -> List[Dweet]:
        stmt = (
            select(Dweet)
            .where(Dweet.thing == thing, visibility.clause())
            .order_by(Dweet.id.desc())
        )
        with self.session() as session:
            return list(session.execute(stmt).scalars())

    def list_ascending(self, thing: str, visibility: VisibilityFilter) -> List[Dweet]:
        return self.list_ascending_from(thing, 0, visibility)

    def list_ascending_from(
        self,
        thing: str,
        cursor_id: int,
        visibility: VisibilityFilter,
        limit: Optional[int] = None,
    ) -> List[Dweet]:
        stmt = (
            select(Dweet)
            .where(Dweet.thing == thing, Dweet.id > cursor_id, visibility.clause())
            .order_by(Dweet.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session() as session:
            return list(session.execute(stmt).scalars())

    def ids_descending(self, thing: str) -> List[int]:
        stmt = select(Dweet.id).where(Dweet.thing == thing).order_by(Dweet.id.desc())
        with self.session() as session:
            return list(session.execute(stmt).scalars())

    def count_all(self) -> int:
        with self.session() as session:
            return session.execute(select(func.count(Dweet.id))).scalar_one()
