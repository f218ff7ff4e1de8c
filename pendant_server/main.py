"""FastAPI app entry point: wires routers, /health and /api/diagnostic around one RelayContext."""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings
from .routers import audio, camera, devices, telemetry, ws
from .schemas import utc_now_iso
from .services.connections import ChannelKind
from .state import RelayContext

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format="%(asctime)s  %(message)s", datefmt="%H:%M:%S")
    for _noisy in ("httpx", "httpcore", "websockets", "multipart"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Smart Pendant relay")
    app.state.relay = RelayContext(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    app.include_router(telemetry.router)
    app.include_router(camera.router)
    app.include_router(audio.router)
    app.include_router(devices.router)
    app.include_router(ws.router)

    @app.get("/health")
    async def health():
        """Liveness check."""
        return {"status": "OK", "timestamp": utc_now_iso()}

    @app.get("/api/diagnostic")
    async def api_diagnostic():
        """Connection counts and relay state at a glance."""
        relay: RelayContext = app.state.relay
        snap = relay.store.read()
        return {
            "viewers": relay.registry.count(ChannelKind.VIEWER),
            "device_controls": relay.registry.count(ChannelKind.DEVICE_CONTROL),
            "buffered_frames": len(relay.frames),
            "frame_buffer_capacity": relay.frames.capacity,
            "device_online": snap.online,
            "device_last_seen": snap.last_seen,
            "audio_relay_mode": relay.audio.mode,
        }

    logger.info("Relay ready for %s (audio relay: %s)", settings.device_id, settings.audio_relay_mode)
    return app


app = create_app()
