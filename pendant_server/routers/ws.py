"""WebSocket channels: viewer apps on / and /ws, the pendant's control channel on /arduino and /ws/arduino."""
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..services.connections import ChannelKind, Connection, encode_message
from ..state import RelayContext

logger = logging.getLogger(__name__)
router = APIRouter()


async def _serve(websocket: WebSocket, kind: ChannelKind) -> None:
    relay: RelayContext = websocket.app.state.relay
    await websocket.accept()
    conn = Connection(websocket, kind)
    relay.registry.register(conn)
    try:
        if kind is ChannelKind.VIEWER:
            snapshot = relay.store.read().to_wire()
            await conn.send(encode_message(relay.settings.telemetry_topic, snapshot))

        while True:
            msg = await websocket.receive()
            if msg["type"] == "websocket.disconnect":
                break
            text = msg.get("text")
            if text is None and msg.get("bytes") is not None:
                text = msg["bytes"].decode("utf-8", errors="replace")
            try:
                data = json.loads(text or "")
            except json.JSONDecodeError as e:
                logger.warning("Invalid message from %s: %s", kind.value, e)
                continue
            # Commands are not acted on yet; the app and pendant only log here.
            logger.info("Message from %s: %s", kind.value, data)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.exception("WebSocket error on %s channel: %s", kind.value, e)
    finally:
        relay.registry.unregister(conn)


@router.websocket("/")
@router.websocket("/ws")
async def ws_viewer(websocket: WebSocket):
    await _serve(websocket, ChannelKind.VIEWER)


@router.websocket("/arduino")
@router.websocket("/ws/arduino")
async def ws_device(websocket: WebSocket):
    await _serve(websocket, ChannelKind.DEVICE_CONTROL)
