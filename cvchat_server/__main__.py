# cvchat_server/__main__.py
# -*- coding: utf-8 -*-
"""
Run the server with `python -m cvchat_server` or the `cvchat-server` script.

Exits with status 1 when OPENAI_API_KEY is missing instead of starting.
"""

from __future__ import annotations

import sys

from cvchat_server.core.config import settings
from cvchat_server.core.errors import ConfigurationFatal
from cvchat_server.utils import get_logger, setup_logging

logger = get_logger("cvchat_server")


def main() -> int:
    setup_logging(debug=settings.debug)
    try:
        settings.require_credentials()
    except ConfigurationFatal as exc:
        logger.critical("Refusing to start: %s", exc)
        return 1

    import uvicorn

    logger.info("Server running on %s:%d", settings.host, settings.port)
    uvicorn.run(
        "cvchat_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=(settings.environment == "development" and settings.debug),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
