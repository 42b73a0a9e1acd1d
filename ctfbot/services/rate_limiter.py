"""
Rate limiting for the stats bot's slash commands.

Simple in-memory sliding-window limiter keyed by user and command.
"""

import time
import asyncio
from functools import wraps
from collections import defaultdict, deque
import logging

from ctfbot.utils.error_embeds import ErrorEmbeds

logger = logging.getLogger(__name__)

class SimpleRateLimiter:
    """In-memory rate limiter for Discord commands."""

    def __init__(self):
        self._requests = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def is_allowed(self, user_id: int, command: str, limit: int, window: int, now: float = None) -> bool:
        """Check if user can execute command within rate limit."""
        if limit <= 0 or window <= 0:
            return False

        key = f"{user_id}:{command}"
        now = time.time() if now is None else now

        async with self._lock:
            requests = self._requests[key]
            # Clean old requests outside window
            while requests and requests[0] <= now - window:
                requests.popleft()

            if len(requests) < limit:
                requests.append(now)
                return True

            return False

def rate_limit(command: str, limit: int = 1, window: int = 60):
    """Decorator for rate limiting app commands, staff (kick members) bypass."""
    def decorator(func):
        @wraps(func)
        async def wrapper(self, interaction, *args, **kwargs):
            permissions = getattr(interaction.user, "guild_permissions", None)
            if permissions is not None and permissions.kick_members:
                return await func(self, interaction, *args, **kwargs)

            if not await self.bot.rate_limiter.is_allowed(interaction.user.id, command, limit, window):
                logger.info(f"Rate limited /{command} for user {interaction.user}")
                await interaction.response.send_message(embed=ErrorEmbeds.rate_limited(command), ephemeral=True)
                return

            return await func(self, interaction, *args, **kwargs)
        return wrapper
    return decorator
