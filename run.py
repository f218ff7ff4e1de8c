"""
Start the pendant relay: HTTP ingestion from the pendant, WebSocket fan-out to viewer apps
and the pendant's control channel.
"""
import uvicorn

from pendant_server.config import load_settings


def main() -> None:
    settings = load_settings()
    print(f"Pendant relay on http://{settings.host}:{settings.port}  (ws viewers: /ws, pendant: /arduino)")
    uvicorn.run(
        "pendant_server.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
