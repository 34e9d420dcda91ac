#!/usr/bin/env python3
"""
Script to run the Book Catalog API server.

Logging is configured by the application lifespan in ``api.main``.
"""

import uvicorn

from api.config import config


def main():
    """Run the API server."""
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
