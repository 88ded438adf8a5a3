"""
monday.com webhook endpoint.

Answers the subscription challenge, then dispatches the event to its
handler. Processing is done before responding so failures surface as 500.
"""

from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse, PlainTextResponse

from monday_sync.core.logging import bind_context, clear_context, get_logger
from monday_sync.core.models import WebhookEvent
from monday_sync.handlers import get_handler

log = get_logger(__name__)

router = APIRouter()


@router.post("/")
@router.post("/webhook")
def receive_webhook(payload: dict[str, Any] = Body(...)):
    """Receive a monday.com webhook."""
    if payload.get("challenge"):
        log.info("webhook_challenge")
        return JSONResponse({"challenge": payload["challenge"]})

    raw_event = payload.get("event")
    if not isinstance(raw_event, dict):
        log.error("webhook_without_event")
        return PlainTextResponse("Invalid payload", status_code=400)

    event = WebhookEvent.from_dict(raw_event)
    bind_context(event_type=event.type, board_id=event.board_id, pulse_id=event.pulse_id)
    try:
        log.info("webhook_received")
        handler = get_handler(event)
        if handler is None:
            log.info("webhook_event_unhandled")
        else:
            result = handler.handle(event)
            log.info("webhook_processed", action=result.action, **result.details)
    except Exception as e:
        log.exception("webhook_processing_error", error=str(e))
        return PlainTextResponse("Error processing the webhook.", status_code=500)
    finally:
        clear_context()

    return PlainTextResponse("Webhook received and processed.")
