# dweetr/api/dweets.py

from typing import Optional, Tuple
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from dweetr.core.rate_limit import enforce_publish_rate_limit
from dweetr.core.waiter import WaitState
from dweetr.models.schemas import DweetOut
from dweetr.services.dweet_service import DweetService

router = APIRouter()

# Keys the home-page form uses to carry the thing name and a raw query string
FORM_THING_KEY = "thing"
FORM_PARAMS_KEY = "params"


def get_service(request: Request) -> DweetService:
    return request.app.state.service


def _publish_params(request: Request, path_thing: Optional[str] = None) -> Tuple[Optional[str], dict]:
    """
    Resolve the thing name and raw payload for a publish.

    A non-empty ``thing`` query value beats the path segment. A ``params``
    query string is merged over the other keys, then ``thing`` and
    ``params`` are dropped from the payload.
    """
    # Repeated keys: last value wins, first position kept
    raw = dict(request.query_params)
    thing = raw.get(FORM_THING_KEY) or path_thing

    params = raw.get(FORM_PARAMS_KEY)
    if params:
        raw.update(parse_qsl(params, keep_blank_values=True))
    raw.pop(FORM_THING_KEY, None)
    raw.pop(FORM_PARAMS_KEY, None)
    return thing, raw


def _cursor(value: Optional[str]) -> int:
    # Unparseable cursors fall back to the start of the thing's history
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


@router.get("/dweet/for/{thing}", dependencies=[Depends(enforce_publish_rate_limit)])
def publish_dweet(thing: str, request: Request, service: DweetService = Depends(get_service)):
    result = service.publish(*_publish_params(request, thing))
    return result.to_json()


@router.get("/dweet/for", dependencies=[Depends(enforce_publish_rate_limit)])
def publish_dweet_form(request: Request, service: DweetService = Depends(get_service)):
    """Form variant: ?thing=name&params=k=v&k2=v2"""
    result = service.publish(*_publish_params(request))
    return result.to_json()


@router.get("/get/latest/dweet/for/{thing}")
def get_latest_dweet(
    thing: str,
    auth: Optional[str] = None,
    service: DweetService = Depends(get_service),
):
    dweet = service.get_latest(thing, auth)
    if dweet is None:
        return {"this": None, "message": "No dweets found"}
    return {"this": DweetOut.from_row(dweet).to_json()}


@router.get("/get/dweets/for/{thing}")
def get_all_dweets(
    thing: str,
    auth: Optional[str] = None,
    service: DweetService = Depends(get_service),
):
    return {"this": [DweetOut.from_row(d).to_json() for d in service.get_all(thing, auth)]}


@router.get("/get/history/for/{thing}")
def get_dweet_history(
    thing: str,
    auth: Optional[str] = None,
    service: DweetService = Depends(get_service),
):
    return {"this": [DweetOut.from_row(d).to_json() for d in service.history(thing, auth)]}


@router.get("/listen/for/dweets/from/{thing}")
async def listen_for_dweets(
    thing: str,
    request: Request,
    since: Optional[str] = None,
    auth: Optional[str] = None,
    service: DweetService = Depends(get_service),
):
    result = await service.listen(
        thing,
        auth_token=auth,
        since_id=_cursor(since),
        is_disconnected=request.is_disconnected,
    )
    if result.state is WaitState.CANCELLED:
        # Nobody is left to read a body
        return Response(status_code=204)
    if result.found:
        return {"this": DweetOut.from_row(result.dweet).to_json()}
    return {"this": None, "message": "No new dweets"}
