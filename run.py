"""Entry point for serving the Startech API with Uvicorn.

Host, port and log level come from the same environment variables as
the application settings (``HOST``, ``PORT``, ``LOG_LEVEL``), so a
single ``.env`` managed by the process manager configures both.

Usage:
    python run.py
"""
import uvicorn

from startech_api.app.core.config import settings


def main() -> None:
    """Serve the API until interrupted."""
    uvicorn.run(
        "startech_api.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
