"""Viewer-to-device audio relay over the device-control WebSocket, or forwarded over HTTP."""
import logging
from typing import Optional

import httpx

from ..config import Settings
from ..schemas import RelayOutcome, utc_now_iso
from .connections import ChannelKind, ConnectionRegistry, broadcast

logger = logging.getLogger(__name__)

AUDIO_TOPIC = "audio/play"


class MissingAudioError(ValueError):
    """Raised when a relay request carries no audio data."""


class AudioRelay:
    def __init__(self, settings: Settings, registry: ConnectionRegistry,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self.registry = registry
        self._transport = transport

    @property
    def mode(self) -> str:
        return self.settings.audio_relay_mode

    async def relay(self, audio: Optional[str], device_id: Optional[str] = None,
                    timestamp: Optional[str] = None) -> RelayOutcome:
        if not audio or not isinstance(audio, str):
            raise MissingAudioError("No audio data provided")
        payload = {
            "audio": audio,
            "timestamp": timestamp or utc_now_iso(),
            "deviceId": device_id or self.settings.device_id,
        }
        logger.info("Audio recording received (%d bytes base64), mode=%s", len(audio), self.mode)
        if self.mode == "http":
            outcome = await self._forward_http(payload)
        else:
            outcome = await self._push_websocket(payload)
        logger.info("Audio relay: success=%s sent=%d", outcome.success, outcome.connected_arduinos)
        return outcome

    async def _push_websocket(self, payload: dict) -> RelayOutcome:
        registered = self.registry.count(ChannelKind.DEVICE_CONTROL)
        if registered == 0:
            logger.warning("No device connected on the control channel")
            return RelayOutcome(
                success=False,
                message="No Arduino connected. Please connect Arduino to WebSocket.",
                connected_arduinos=0,
            )
        sent = await broadcast(self.registry.device_controls, AUDIO_TOPIC, payload)
        if sent > 0:
            return RelayOutcome(
                success=True,
                message=f"Audio sent to {sent} Arduino(s) via WebSocket",
                connected_arduinos=sent,
            )
        return RelayOutcome(
            success=False,
            message="Arduino connected but WebSocket not ready",
            connected_arduinos=registered,
        )

    async def _forward_http(self, payload: dict) -> RelayOutcome:
        url = self.settings.device_audio_url
        if not url:
            logger.warning("AUDIO_RELAY_MODE=http but DEVICE_AUDIO_URL is not set")
            return RelayOutcome(
                success=False,
                message="Audio received but no device address is configured",
                connected_arduinos=0,
            )
        try:
            async with httpx.AsyncClient(timeout=self.settings.audio_forward_timeout, transport=self._transport) as client:
                resp = await client.post(url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Audio forward to %s failed: %s", url, e)
            return RelayOutcome(
                success=False,
                message="Audio received but device unreachable (offline?)",
                connected_arduinos=0,
            )
        return RelayOutcome(success=True, message="Audio forwarded to device over HTTP", connected_arduinos=1)
