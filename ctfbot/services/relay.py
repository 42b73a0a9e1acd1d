"""
Staff message relay from Discord to the game server.

Staff queue messages with `/x`; the game server polls the HTTP endpoint and
receives everything queued since its last poll.
"""

import json
from typing import List, Optional

from aiohttp import web

from ctfbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class RelayQueue:
    """Append/drain queue of outbound staff messages."""

    def __init__(self):
        self._messages: List[str] = []

    def push(self, sender: str, message: str) -> str:
        line = f"<{sender}@Discord> {message}"
        self._messages.append(line)
        return line

    def drain(self) -> List[str]:
        """Return and clear every queued message."""
        # Swap instead of copy + clear so an append can't land in between
        messages, self._messages = self._messages, []
        return messages

    def __len__(self) -> int:
        return len(self._messages)


def create_relay_app(queue: RelayQueue) -> web.Application:
    app = web.Application()

    async def relay(request: web.Request) -> web.Response:
        if request.method != "GET" or not len(queue):
            return web.Response(status=200)

        messages = queue.drain()
        logger.info("Relaying staff messages: " + "-|-".join(messages))
        return web.Response(status=200, text=json.dumps(messages), content_type="text/plain")

    app.router.add_route("*", "/{tail:.*}", relay)
    return app


class RelayServer:
    """Runs the relay endpoint alongside the bot on the same event loop."""

    def __init__(self, queue: RelayQueue, host: str, port: int):
        self.queue = queue
        self.host = host
        self.port = port
        self._runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        self._runner = web.AppRunner(create_relay_app(self.queue))
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Staff message relay listening on {self.host}:{self.port}")

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
