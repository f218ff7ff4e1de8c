"""Live WebSocket connections split into viewer and device-control sets, plus topic broadcast."""
import json
import logging
from enum import Enum
from typing import Any, Iterable

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class ChannelKind(str, Enum):
    VIEWER = "viewer"
    DEVICE_CONTROL = "device_control"


class Connection:
    """A WebSocket tagged with the channel it registered on."""

    def __init__(self, websocket: WebSocket, kind: ChannelKind) -> None:
        self.websocket = websocket
        self.kind = kind

    @property
    def is_open(self) -> bool:
        ws = self.websocket
        return (
            ws.client_state == WebSocketState.CONNECTED
            and ws.application_state == WebSocketState.CONNECTED
        )

    async def send(self, message: str) -> None:
        await self.websocket.send_text(message)

    def __repr__(self) -> str:
        client = getattr(self.websocket, "client", None)
        return f"<Connection {self.kind.value} {client}>"


class ConnectionRegistry:
    def __init__(self) -> None:
        self._sets: dict[ChannelKind, set[Connection]] = {kind: set() for kind in ChannelKind}

    def register(self, connection: Connection) -> None:
        self._sets[connection.kind].add(connection)
        logger.info("%s connected; total=%d", connection.kind.value, self.count(connection.kind))

    def unregister(self, connection: Connection) -> None:
        members = self._sets[connection.kind]
        if connection not in members:
            return
        members.discard(connection)
        logger.info("%s disconnected; remaining=%d", connection.kind.value, len(members))

    def connections(self, kind: ChannelKind) -> list[Connection]:
        """Snapshot of the members, safe to iterate while others connect or leave."""
        return list(self._sets[kind])

    def count(self, kind: ChannelKind) -> int:
        return len(self._sets[kind])

    @property
    def viewers(self) -> list[Connection]:
        return self.connections(ChannelKind.VIEWER)

    @property
    def device_controls(self) -> list[Connection]:
        return self.connections(ChannelKind.DEVICE_CONTROL)


def encode_message(topic: str, payload: Any) -> str:
    return json.dumps({"topic": topic, "payload": payload}, separators=(",", ":"), ensure_ascii=False)


async def broadcast(connections: Iterable[Connection], topic: str, payload: Any) -> int:
    """Send {topic, payload} to every open connection. Returns how many sends succeeded."""
    message = encode_message(topic, payload)
    sent = 0
    for conn in list(connections):
        if not conn.is_open:
            continue
        try:
            await conn.send(message)
        except Exception as e:
            logger.debug("Send to %r failed: %s", conn, e)
            continue
        sent += 1
    logger.info("Broadcast %s to %d connection(s)", topic, sent)
    return sent
