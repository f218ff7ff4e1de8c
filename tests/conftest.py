import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from pendant_server.config import Settings
from pendant_server.main import create_app


class FakeWebSocket:
    """Stands in for a Starlette WebSocket: records sent text, reports a connection state."""

    def __init__(self, open_: bool = True, fail: bool = False):
        state = WebSocketState.CONNECTED if open_ else WebSocketState.DISCONNECTED
        self.client_state = state
        self.application_state = state
        self.fail = fail
        self.sent: list[str] = []
        self.client = ("test", 0)

    async def send_text(self, text: str) -> None:
        if self.fail:
            raise RuntimeError("socket broke")
        self.sent.append(text)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def relay(app):
    return app.state.relay


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
