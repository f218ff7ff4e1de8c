from pendant_server.config import load_settings

ENV_VARS = ("HOST", "PORT", "DEVICE_ID", "FRAME_BUFFER_SIZE", "AUDIO_RELAY_MODE",
            "DEVICE_AUDIO_URL", "AUDIO_FORWARD_TIMEOUT", "CORS_ORIGINS", "LOG_LEVEL")


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setattr("pendant_server.config.ENV_FILE", "/nonexistent/.env")
    s = load_settings()
    assert s.port == 3000
    assert s.frame_buffer_size == 10
    assert s.audio_relay_mode == "websocket"
    assert s.audio_forward_timeout == 10.0
    assert s.telemetry_topic == "devices/pendant-1/telemetry"


def test_overrides_and_bad_values(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setattr("pendant_server.config.ENV_FILE", "/nonexistent/.env")
    monkeypatch.setenv("PORT", "abc")
    monkeypatch.setenv("DEVICE_ID", "pendant-9")
    monkeypatch.setenv("FRAME_BUFFER_SIZE", "0")
    monkeypatch.setenv("AUDIO_RELAY_MODE", "HTTP")
    monkeypatch.setenv("DEVICE_AUDIO_URL", " http://10.0.0.5/audio ")
    monkeypatch.setenv("CORS_ORIGINS", "http://a, http://b")
    s = load_settings()
    assert s.port == 3000
    assert s.frame_buffer_size == 10
    assert s.audio_relay_mode == "http"
    assert s.device_audio_url == "http://10.0.0.5/audio"
    assert s.cors_origins == ["http://a", "http://b"]
    assert s.alert_topic == "devices/pendant-9/alert"


def test_unknown_audio_mode_falls_back(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setattr("pendant_server.config.ENV_FILE", "/nonexistent/.env")
    monkeypatch.setenv("AUDIO_RELAY_MODE", "carrier-pigeon")
    assert load_settings().audio_relay_mode == "websocket"
