"""Process host: builds the state, serves HTTP and shuts down on signals."""

import asyncio
import signal
import sys

import uvicorn

from .app import create_app
from .core import CollectionBoxError, Settings, get_logger, setup_logging
from .state import close_state, initialize_state

logger = get_logger(__name__)


def _install_signal_handlers(server: uvicorn.Server) -> None:
    """Make SIGINT / SIGTERM request a graceful stop instead of killing us.

    uvicorn restores these handlers and re-delivers the signal it caught once
    serving ends; landing here keeps the exit code at 0.
    """

    def _request_exit(signum, frame):
        logger.info("Shutdown signal received", signal=signal.Signals(signum).name)
        server.should_exit = True

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _request_exit)


async def serve(settings: Settings) -> int:
    """Run the service until a shutdown signal; return the exit code."""
    try:
        state = await initialize_state(settings)
    except CollectionBoxError as exc:
        logger.error("Startup failed", error=str(exc))
        return 1

    app = create_app(state=state)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        timeout_keep_alive=int(settings.read_timeout_seconds),
        timeout_graceful_shutdown=int(settings.write_timeout_seconds),
    )
    server = uvicorn.Server(config)
    _install_signal_handlers(server)

    logger.info("Server starting", host=settings.host, port=settings.port)
    try:
        await server.serve()
    finally:
        await close_state(state)
        logger.info("Store closed")

    if not server.started:
        logger.error("Server failed to start")
        return 1

    logger.info("Server stopped")
    return 0


def main() -> int:
    settings = Settings()
    setup_logging(settings)
    return asyncio.run(serve(settings))


if __name__ == "__main__":
    sys.exit(main())
