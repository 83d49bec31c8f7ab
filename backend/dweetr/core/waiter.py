# dweetr/core/waiter.py

import asyncio
import enum
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from starlette.concurrency import run_in_threadpool

from dweetr.config import LISTEN_MAX_WAIT_SECONDS, LISTEN_POLL_INTERVAL_SECONDS
from dweetr.core.access import VisibilityFilter
from dweetr.core.store import MessageStore
from dweetr.models.dweet import Dweet

logger = logging.getLogger(__name__)


class WaitState(enum.Enum):
    POLLING = "polling"
    FOUND = "found"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WaitResult:
    state: WaitState
    dweet: Optional[Dweet] = None

    @property
    def found(self) -> bool:
        return self.state is WaitState.FOUND


class LongPollWaiter:
    """
    Blocks a listen request until a dweet newer than the cursor shows up.

    Each iteration is one store query followed by one awaited sleep, so
    a waiting request holds no thread between checks and stops within one
    poll interval of being cancelled or disconnected. The waiter hands back
    the *earliest* unseen dweet, so a caller that feeds each id back as the
    next cursor sees every dweet once, in order.
    """

    def __init__(
        self,
        store: MessageStore,
        max_wait_seconds: float = LISTEN_MAX_WAIT_SECONDS,
        poll_interval_seconds: float = LISTEN_POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be positive")
        self.store = store
        self.max_wait_seconds = max_wait_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self.clock = clock
        self.sleep = sleep

    async def _next_after(
        self, thing: str, cursor_id: int, visibility: VisibilityFilter
    ) -> Optional[Dweet]:
        rows = await run_in_threadpool(
            self.store.list_ascending_from, thing, cursor_id, visibility, 1
        )
        return rows[0] if rows else None

    async def wait(
        self,
        thing: str,
        cursor_id: int,
        visibility: VisibilityFilter,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> WaitResult:
        started = self.clock()
        state = WaitState.POLLING
        polls = 0

        while state is WaitState.POLLING:
            if is_disconnected is not None and await is_disconnected():
                state = WaitState.CANCELLED
                break

            dweet = await self._next_after(thing, cursor_id, visibility)
            polls += 1
            if dweet is not None:
                logger.debug(f"Listen on {thing!r} found dweet {dweet.id} after {polls} polls")
                return WaitResult(WaitState.FOUND, dweet)

            if self.clock() - started >= self.max_wait_seconds:
                state = WaitState.TIMED_OUT
                break

            await self.sleep(self.poll_interval_seconds)

        logger.debug(f"Listen on {thing!r} ended {state.value} after {polls} polls")
        return WaitResult(state)
