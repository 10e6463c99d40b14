"""Entry point for running the Todo API server.

Intended to be executed from the project root, for example under
Docker, where you only specify a single Python file to run.  Host,
port, datastore and log level come from environment variables (see
``todo_api.app.core.config``).

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from todo_api.app.core.config import settings
from todo_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_level="info")
    server = Server(config)
    logging.getLogger(__name__).info("Started on port %s", settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
