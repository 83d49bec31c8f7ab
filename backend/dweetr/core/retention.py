# dweetr/core/retention.py

import logging
from dataclasses import dataclass
from datetime import timedelta

from dweetr.config import MAX_AGE_HOURS, MAX_DWEETS_PER_THING
from dweetr.core.store import MessageStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=MAX_AGE_HOURS)
DEFAULT_MAX_COUNT = MAX_DWEETS_PER_THING


@dataclass(frozen=True)
class PruneResult:
    expired: int = 0
    trimmed: int = 0

    @property
    def total(self) -> int:
        return self.expired + self.trimmed


class RetentionPolicy:
    """
    Keeps a thing's history short: nothing older than ``max_age`` and at most
    ``max_count`` dweets. Runs right after each publish, for that thing only.
    """

    def __init__(
        self,
        store: MessageStore,
        max_age: timedelta = DEFAULT_MAX_AGE,
        max_count: int = DEFAULT_MAX_COUNT,
    ):
        if max_count < 1:
            raise ValueError("max_count must be at least 1")
        self.store = store
        self.max_age = max_age
        self.max_count = max_count

    def prune(self, thing: str) -> PruneResult:
        # 1. Age eviction
        cutoff = self.store.clock() - self.max_age
        expired = self.store.delete_older_than(thing, cutoff)

        # 2. Count eviction on whatever survived, newest first
        ids = self.store.ids_descending(thing)
        trimmed = 0
        if len(ids) > self.max_count:
            trimmed = self.store.delete_by_ids(ids[self.max_count:])

        result = PruneResult(expired=expired, trimmed=trimmed)
        if result.total:
            logger.debug(
                f"Pruned {thing!r}: {expired} expired, {trimmed} over limit "
                f"(cutoff={cutoff.isoformat()})"
            )
        return result
