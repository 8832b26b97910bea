"""
HTTP mirror of the WebSocket protocol, for clients that only speak HTTP.
Stateless: artwork is served on every request.
"""

import logging
from pathlib import Path

from aiohttp import web

logger = logging.getLogger(__name__)

CACHE_KEY = web.AppKey('status_cache', object)


async def serve_status(request):
    snapshot = request.app[CACHE_KEY].latest()
    if snapshot is None:
        return web.Response(text='null', content_type='application/json')
    return web.Response(text=snapshot.to_json(), content_type='application/json')


async def serve_artwork(request):
    snapshot = request.app[CACHE_KEY].latest()
    index = request.match_info['index']
    if snapshot is None or not index.isdigit():
        raise web.HTTPNotFound()

    artwork = snapshot.artwork_at(int(index))
    if artwork is None:
        raise web.HTTPNotFound()

    if not artwork.is_local:
        raise web.HTTPFound(artwork.src)

    path = Path(artwork.local_path)
    if not path.is_file():
        logger.warning(f"Artwork file missing: {path}")
        raise web.HTTPNotFound()
    return web.FileResponse(path)


def create_app(cache) -> web.Application:
    app = web.Application()
    app[CACHE_KEY] = cache
    app.router.add_get('/status', serve_status)
    app.router.add_get('/artwork/{index}', serve_artwork)
    return app


async def start_http(cache, host: str, port: int) -> web.AppRunner:
    """Starts the mirror; the caller owns the returned runner and must clean it up."""
    runner = web.AppRunner(create_app(cache))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"HTTP mirror bound to {host}:{port}")
    return runner
