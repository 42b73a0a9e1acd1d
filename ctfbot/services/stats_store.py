"""
Read-only access to the game's score store.

The game server keeps one sorted set per (mode, counter) pair, keyed
`<mode>|<counter>`, with player names as members and counter values as scores.
"""

from typing import List, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from ctfbot.constants import StatKeys
from ctfbot.utils.logger import setup_logger
from ctfbot.utils.stats_exceptions import StoreReadError

logger = setup_logger(__name__)


class StatsStore:
    """Thin wrapper over the Redis commands the rankings engine needs."""

    MODE_PATTERN = "ctf_mode_*|" + StatKeys.SCORE

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @staticmethod
    def key(mode: str, stat: str) -> str:
        return f"{mode}|{stat}"

    async def mode_ids(self) -> List[str]:
        """Technical ids of every mode that has a score ranking."""
        try:
            keys = [key async for key in self.client.scan_iter(match=self.MODE_PATTERN)]
        except RedisError as e:
            raise StoreReadError("mode discovery", str(e)) from e
        return sorted({_decode(key).rsplit("|", 1)[0] for key in keys})

    async def ranking(self, mode: str) -> List[Tuple[str, float]]:
        """All (player name, score) pairs of a mode, best score first."""
        try:
            rows = await self.client.zrange(
                self.key(mode, StatKeys.SCORE), 0, -1, desc=True, withscores=True
            )
        except RedisError as e:
            raise StoreReadError(f"ranking of {mode}", str(e)) from e
        logger.debug(f"Read {len(rows)} ranked players for {mode}")
        return [(_decode(name), score) for name, score in rows]

    async def counter(self, mode: str, stat: str, name: str) -> Optional[float]:
        """One counter of one player, None when the player has no entry."""
        try:
            return await self.client.zscore(self.key(mode, stat), name)
        except RedisError as e:
            raise StoreReadError(f"{stat} of {name} in {mode}", str(e)) from e


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
