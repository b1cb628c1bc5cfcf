"""
ParkRide Backend
================
Entry point. Run with ``python main.py`` or ``uvicorn main:app``; host, port
and reload come from settings (``APP_HOST``, ``APP_PORT``, ``APP_RELOAD``).
"""

import uvicorn

from parkride.api.app import create_app
from parkride.config import settings

app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_reload,
        log_level=settings.log_level.lower(),
    )
