# dweetr/core/rate_limit.py

from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from dweetr.core.errors import RateLimited

PUBLISH_SCOPE = "publish"


def create_limiter() -> Limiter:
    # Keyed by client address; one limiter per app so counters never leak across apps
    return Limiter(key_func=get_remote_address)


def enforce_publish_rate_limit(request: Request) -> None:
    """
    Rate limiting dependency for the publish routes.
    Reads the limiter and its limit from the app that received the request.
    """
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return

    item = parse(request.app.state.publish_rate_limit)
    if not limiter.limiter.hit(item, PUBLISH_SCOPE, get_remote_address(request)):
        raise RateLimited(f"Rate limit exceeded: {item}")
