#!/usr/bin/env python3
"""Development server runner for the HexaTegy relay."""

import uvicorn

from hexategy.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "hexategy.server.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,  # Auto-reload on code changes
        log_level=settings.log_level,
    )
