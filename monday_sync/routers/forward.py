"""
Webhook forwarder.

Relays a monday.com webhook to the service in charge of its board.
"""

from typing import Any

import httpx
from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from monday_sync.config import settings
from monday_sync.core.logging import get_logger

log = get_logger(__name__)

router = APIRouter()


def resolve_target(board_id: Any) -> str | None:
    """Base URL of the service handling board_id."""
    try:
        return settings.forward_map.get(int(board_id))
    except (TypeError, ValueError):
        return None


@router.post("/forward")
async def forward_webhook(payload: dict[str, Any] = Body(...)):
    if payload.get("challenge"):
        log.info("forward_challenge", challenge=payload["challenge"])
        return JSONResponse({"challenge": payload["challenge"]})

    event = payload.get("event")
    if not isinstance(event, dict):
        log.error("forward_without_event")
        return PlainTextResponse("Invalid payload", status_code=400)

    board_id = event.get("boardId")
    target = resolve_target(board_id)
    if target is None:
        log.warning("forward_unknown_board", board_id=board_id)
        return PlainTextResponse("Unknown boardId", status_code=400)

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            r = await client.post(f"{target.rstrip('/')}/webhook", json=payload)
    except httpx.HTTPError as e:
        log.error("forward_error", board_id=board_id, target=target, error=str(e))
        return PlainTextResponse("Error forwarding webhook", status_code=500)

    log.info("webhook_forwarded", board_id=board_id, target=target, status=r.status_code)
    return Response(
        content=r.content,
        status_code=r.status_code,
        media_type=r.headers.get("content-type"),
    )
