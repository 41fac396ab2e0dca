"""Standalone server launcher.

The engine is normally mounted in-process by a host application. For local
development the same routers can be served directly:

    building-engine

or, without the launcher:

    uvicorn building_engine.main:app --reload
"""

from __future__ import annotations

from typing import Optional

import uvicorn

from building_engine.utils.config import Settings, get_settings
from building_engine.utils.logger import get_logger


logger = get_logger(__name__)

APP_IMPORT_PATH = "building_engine.main:app"


def main(settings: Optional[Settings] = None, reload: bool = False) -> None:
    """Start uvicorn on the configured host and port; blocks until stopped."""
    resolved_settings = settings or get_settings()
    logger.info(
        "Starting server | host=%s | port=%s | docs=http://%s:%s/docs",
        resolved_settings.server_host,
        resolved_settings.server_port,
        resolved_settings.server_host,
        resolved_settings.server_port,
    )
    uvicorn.run(
        APP_IMPORT_PATH,
        host=resolved_settings.server_host,
        port=resolved_settings.server_port,
        reload=reload,
        log_level=resolved_settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
