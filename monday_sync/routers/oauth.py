"""
Zoho OAuth redirect endpoint.

Shows the authorization code so it can be exchanged for the refresh token
configured in ZOHO_REFRESH_TOKEN.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from monday_sync.core.logging import get_logger

log = get_logger(__name__)

router = APIRouter()


@router.get("/oauth/callback")
async def oauth_callback(code: str | None = None):
    if not code:
        return PlainTextResponse("No auth code received", status_code=400)
    log.info("oauth_code_received")
    return PlainTextResponse(f"Auth code received: {code}")
