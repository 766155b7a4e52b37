import asyncio
import json
import time

from fastapi import Depends
from fastapi.routing import APIRouter
from sse_starlette.sse import EventSourceResponse

from app.routers.issues import get_issue_store
from app.services.issue_store import IssueStore

router = APIRouter()

_HEARTBEAT_INTERVAL = 5.0


@router.get("/events", response_class=EventSourceResponse)
async def events(store: IssueStore = Depends(get_issue_store)) -> EventSourceResponse:
    async def _event_generator():
        async for item in _heartbeat_stream(store):
            yield item

    return EventSourceResponse(_event_generator())


async def _heartbeat_stream(store: IssueStore, heartbeat_interval: float = _HEARTBEAT_INTERVAL):
    """Yield one SSE frame per published state, interspersed with periodic heartbeats.

    The current state is sent first so a new subscriber can render immediately.
    Emits a heartbeat JSON frame after each ``heartbeat_interval`` seconds of
    silence. Exits cleanly when the store sends its STOP sentinel.
    """
    q = store.subscribe()
    try:
        yield {"event": "state", "data": store.state.model_dump_json(by_alias=True)}
        while True:
            try:
                item = await asyncio.wait_for(q.get(), timeout=heartbeat_interval)
                if item is IssueStore.STOP:
                    break
                yield {"event": "state", "data": item}
            except TimeoutError:
                yield {"data": json.dumps({"type": "heartbeat", "ts": int(time.time())})}
    finally:
        store.unsubscribe(q)
