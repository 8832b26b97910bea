"""
MPRIS WebSocket Bridge server
Polls the session bus on a background thread and answers WebSocket
(and optionally HTTP) clients from the latest status.
"""

import asyncio
import logging
import signal
import sys

import websockets

from .cache import StatusCache
from .config import compile_patterns, parse_address, parse_settings, save_config, validate
from .errors import BusUnavailableError, ConfigError
from .handler import ConnectionHandler
from .http_mirror import start_http
from .locator import PlayerLocator
from .poller import StatusPoller

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = 'INFO'):
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger('websockets').setLevel(max(numeric, logging.WARNING))
    logging.getLogger('aiohttp.access').setLevel(max(numeric, logging.WARNING))


# ============================================================================
# WEBSOCKET SERVER
# ============================================================================

def make_client_handler(cache, timeout: float = 0.0):
    """Returns the websockets connection callback; one ConnectionHandler per client."""

    async def handle_client(websocket):
        peer = websocket.remote_address
        logger.info(f"Client connected: {peer}")
        try:
            await ConnectionHandler(cache, timeout).serve(websocket)
        finally:
            logger.info(f"Client disconnected: {peer}")

    return handle_client


async def server_main(cache, ws_address, http_address=None, timeout: float = 0.0):
    host, port = ws_address
    ws_server = await websockets.serve(make_client_handler(cache, timeout), host, port)
    logger.info(f"Bound to ip {host}:{port}!")

    runner = None
    try:
        if http_address:
            runner = await start_http(cache, *http_address)

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop.set)
        await stop.wait()
        logger.info("Shutting down")
    finally:
        ws_server.close()
        await ws_server.wait_closed()
        if runner is not None:
            await runner.cleanup()


# ============================================================================
# ENTRY POINT
# ============================================================================

def run(settings) -> int:
    from .mpris import MprisBus

    try:
        ws_address = parse_address(settings.ip)
        http_address = parse_address(settings.http) if settings.http else None
    except ConfigError as e:
        logger.error(str(e))
        return 1

    try:
        bus = MprisBus()
    except BusUnavailableError as e:
        logger.error(f"{e}. Is a D-Bus session running?")
        return 1

    cache = StatusCache()
    poller = StatusPoller(
        PlayerLocator(bus, compile_patterns(settings.app_names)),
        cache,
        min_delay=settings.min_delay,
        max_delay=settings.max_delay,
        interval=settings.interval,
    )
    poller.start()

    try:
        asyncio.run(server_main(cache, ws_address, http_address, settings.timeout))
    except OSError as e:
        logger.error(f"Could not bind: {e}. Specify a free address with --ip / --http")
        return 1
    finally:
        poller.stop(timeout=settings.max_delay)
    return 0


def main(argv=None) -> int:
    try:
        settings, args = parse_settings(argv)
    except ConfigError as e:
        setup_logging()
        logger.error(str(e))
        return 1

    setup_logging(settings.log_level)
    settings = validate(settings)

    if args.save_config:
        save_config(settings.to_dict(), args.config)

    return run(settings)


if __name__ == '__main__':
    sys.exit(main())
