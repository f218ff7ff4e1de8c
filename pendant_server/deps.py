"""FastAPI dependencies shared by the routers."""
import json
import logging

from fastapi import Request

from .state import RelayContext

logger = logging.getLogger(__name__)


def get_relay(request: Request) -> RelayContext:
    return request.app.state.relay


async def json_object(request: Request) -> dict:
    """Request body as a dict; empty, invalid or non-object bodies become {}."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Malformed JSON body on %s: %s", request.url.path, e)
        return {}
    if not isinstance(body, dict):
        logger.warning("Expected a JSON object on %s, got %s", request.url.path, type(body).__name__)
        return {}
    return body
