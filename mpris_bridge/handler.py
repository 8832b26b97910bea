"""
Per-connection WebSocket protocol.

Requests are text frames:
  'artwork/<index>'  -> raw bytes (local file), the URI (remote) or 'null'
  anything else      -> the latest status as JSON, or 'null'
"""

import asyncio
import logging
from pathlib import Path

import websockets
import websockets.exceptions

logger = logging.getLogger(__name__)

NULL_REPLY = 'null'
ARTWORK_PREFIX = 'artwork/'


class ConnectionHandler:
    """Answers the requests of one client; remembers the last artwork it sent."""

    def __init__(self, cache, timeout: float = 0.0):
        self._cache = cache
        self.timeout = timeout
        self.last_artwork = None

    async def _snapshot(self, wait: bool = False):
        snapshot = self._cache.latest()
        if snapshot is None and wait and self.timeout > 0:
            loop = asyncio.get_running_loop()
            snapshot = await loop.run_in_executor(None, self._cache.wait_for, self.timeout)
        return snapshot

    async def _artwork(self, index: str):
        if not index.isdigit() or not index.isascii():
            return NULL_REPLY

        snapshot = await self._snapshot()
        if snapshot is None:
            return NULL_REPLY

        artwork = snapshot.artwork_at(int(index))
        if artwork is None or artwork == self.last_artwork:
            return NULL_REPLY

        self.last_artwork = artwork
        if not artwork.is_local:
            return artwork.src

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, Path(artwork.local_path).read_bytes)
        except OSError as e:
            logger.warning(f"Could not read artwork {artwork.src}: {e}")
            self.last_artwork = None
            return NULL_REPLY

    async def respond(self, request: str):
        """Returns the reply (str or bytes) for one text request."""
        if request.startswith(ARTWORK_PREFIX):
            return await self._artwork(request[len(ARTWORK_PREFIX):])

        snapshot = await self._snapshot(wait=True)
        if snapshot is None:
            return NULL_REPLY
        return snapshot.to_json()

    async def serve(self, websocket):
        """Reads frames until the client goes away."""
        try:
            async for message in websocket:
                if not isinstance(message, str):
                    continue
                reply = await self.respond(message)
                logger.debug(f"Responded to WS! Request: {message!r}, reply: {_describe(reply)}")
                await websocket.send(reply)
        except websockets.exceptions.ConnectionClosed:
            pass


def _describe(reply) -> str:
    if isinstance(reply, bytes):
        return f'<{len(reply)} bytes>'
    return reply if len(reply) <= 200 else reply[:200] + '...'
