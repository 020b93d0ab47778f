"""Server-sent events channel for a logged-in account.

EventSource clients cannot set headers, so the gate accepts the token from
the ``token`` query parameter here and checks it against the path uid.
"""

import asyncio
import json
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from adminpanel.api.deps import gate
from adminpanel.services.gate import AuthUser, RouteAuth

router = APIRouter(prefix="/sse", tags=["sse"])

HEARTBEAT_INTERVAL = 30


async def _event_stream(request: Request, user: AuthUser) -> AsyncGenerator[str, None]:
    yield f"event: connected\ndata: {json.dumps({'uid': str(user.uid)})}\n\n"
    while not await request.is_disconnected():
        await asyncio.sleep(HEARTBEAT_INTERVAL)
        yield ": heartbeat\n\n"


@router.get("/{uid}")
async def subscribe(
    uid: str,
    request: Request,
    current_user: AuthUser = Depends(gate(RouteAuth.login())),
) -> StreamingResponse:
    return StreamingResponse(_event_stream(request, current_user), media_type="text/event-stream")
