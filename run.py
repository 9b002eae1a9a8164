#!/usr/bin/env python3
"""Run the copy generation backend."""
import uvicorn

from copychain.api.dependencies import get_config

if __name__ == "__main__":
    config = get_config()
    uvicorn.run(
        "copychain.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.log_level.upper() == "DEBUG",
    )
