"""
Live game status: polls the game server API and keeps one status message up
to date in the game stats channel.
"""

from typing import Any, Dict, Optional

import aiohttp
import discord

from ctfbot.utils.embeds import build_game_status_embed
from ctfbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class GameStatusService:
    """Fetches the game API and publishes its status embed."""

    def __init__(self, api_url: str, timeout: float = 10):
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch_status(self) -> Optional[Dict[str, Any]]:
        """Game API payload, None when unreachable or missing the current map."""
        session = await self._get_session()
        try:
            async with session.get(self.api_url) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Failed to fetch game API data: {e}")
            return None

        if not isinstance(data, dict) or not data.get("current_map") or not data.get("current_mode"):
            logger.debug("Game API returned no current map")
            return None
        return data

    async def publish(self, data: Dict[str, Any], channel) -> bool:
        """Edit the bot's last status message, or send a new one."""
        embed = build_game_status_embed(data)
        try:
            last = [message async for message in channel.history(limit=1)]
            if last and last[0].author.bot:
                await last[0].edit(embed=embed)
            else:
                await channel.send(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Failed to update game status message: {e}")
            return False
        return True
