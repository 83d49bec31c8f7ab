# dweetr/services/dweet_service.py

import asyncio
from typing import Awaitable, Callable, List, Mapping, Optional

import structlog

from dweetr.config import LISTEN_DEADLINE_SECONDS
from dweetr.core.access import VisibilityFilter, generate_token, split_control_fields
from dweetr.core.errors import ValidationError
from dweetr.core.retention import RetentionPolicy
from dweetr.core.store import MessageStore
from dweetr.core.waiter import LongPollWaiter, WaitResult, WaitState
from dweetr.models.dweet import Dweet
from dweetr.models.schemas import PublishResult

logger = structlog.get_logger(__name__)


def _require_thing(thing: Optional[str]) -> str:
    # Blank names are rejected; anything else is the thing's name as given
    if not thing or not thing.strip():
        raise ValidationError("Thing name is required")
    return thing


class DweetService:
    """Publish and read operations, wired to one shared store."""

    def __init__(
        self,
        store: MessageStore,
        retention: RetentionPolicy,
        waiter: LongPollWaiter,
        listen_deadline_seconds: float = LISTEN_DEADLINE_SECONDS,
    ):
        if listen_deadline_seconds <= waiter.max_wait_seconds:
            raise ValueError(
                "listen_deadline_seconds must be greater than the waiter's max_wait_seconds"
            )
        self.store = store
        self.retention = retention
        self.waiter = waiter
        self.listen_deadline_seconds = listen_deadline_seconds

    def publish(self, thing: str, raw_params: Mapping[str, str]) -> PublishResult:
        thing = _require_thing(thing)
        control, payload = split_control_fields(raw_params)
        if not payload:
            raise ValidationError("No data provided")

        token = generate_token() if control.is_private else None
        dweet = self.store.append(thing, payload, is_private=control.is_private, token=token)
        logger.info("dweet_published", thing=thing, dweet_id=dweet.id, private=control.is_private)

        # The dweet is stored; a failed prune is retried by the next publish
        try:
            pruned = self.retention.prune(thing)
        except Exception:
            logger.exception("retention_failed", thing=thing)
        else:
            if pruned.total:
                logger.info(
                    "retention_pruned", thing=thing, expired=pruned.expired, trimmed=pruned.trimmed
                )

        return PublishResult(
            thing=thing,
            data=payload,
            private=control.is_private,
            token=token,
        )

    def get_latest(self, thing: str, auth_token: Optional[str] = None) -> Optional[Dweet]:
        return self.store.latest(_require_thing(thing), VisibilityFilter.for_token(auth_token))

    def get_all(self, thing: str, auth_token: Optional[str] = None) -> List[Dweet]:
        return self.store.list_descending(
            _require_thing(thing), VisibilityFilter.for_token(auth_token)
        )

    def history(self, thing: str, auth_token: Optional[str] = None) -> List[Dweet]:
        """Retained dweets oldest first, the shape chart views want."""
        return self.store.list_ascending(
            _require_thing(thing), VisibilityFilter.for_token(auth_token)
        )

    async def listen(
        self,
        thing: str,
        auth_token: Optional[str] = None,
        since_id: int = 0,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> WaitResult:
        thing = _require_thing(thing)
        try:
            result = await asyncio.wait_for(
                self.waiter.wait(
                    thing,
                    since_id,
                    VisibilityFilter.for_token(auth_token),
                    is_disconnected=is_disconnected,
                ),
                timeout=self.listen_deadline_seconds,
            )
        except asyncio.TimeoutError:
            result = WaitResult(WaitState.TIMED_OUT)

        logger.debug(
            "listen_finished",
            thing=thing,
            since=since_id,
            state=result.state.value,
            dweet_id=result.dweet.id if result.dweet is not None else None,
        )
        return result

    def count_all(self) -> int:
        return self.store.count_all()
