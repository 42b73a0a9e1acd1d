"""
Keeps the rankings channel in sync with the latest rendered leaderboards.

The channel holds one message per mode. When the channel already has enough
messages they are edited in place, oldest message first page, so the reading
order stays stable across updates; otherwise every page is sent anew.
"""

from datetime import datetime
from typing import List, Optional, Sequence

import discord

from ctfbot.data_models.stats import LeaderboardPage
from ctfbot.utils.embeds import build_leaderboard_embed
from ctfbot.utils.logger import setup_logger

logger = setup_logger(__name__)


async def resolve_channel(client, channel_id: Optional[int]) -> Optional[discord.abc.Messageable]:
    """Fetch a text channel by id, None (logged) when it is unset or unusable."""
    if not channel_id:
        logger.debug("No channel configured, skipping")
        return None

    channel = client.get_channel(channel_id)
    if channel is None:
        try:
            channel = await client.fetch_channel(channel_id)
        except discord.HTTPException as e:
            logger.error(f"Unable to fetch channel {channel_id}: {e}")
            return None

    if not isinstance(channel, discord.abc.Messageable):
        logger.error(f"Channel {channel_id} isn't text based")
        return None
    return channel


async def oldest_first(channel, limit: int) -> List[discord.Message]:
    """The `limit` most recent messages of a channel, ordered oldest to newest."""
    messages = [message async for message in channel.history(limit=limit)]
    return sorted(messages, key=lambda message: message.created_at)


class LeaderboardPublisher:
    """Publishes leaderboard pages to a channel."""

    async def publish(
        self,
        pages: Sequence[LeaderboardPage],
        channel,
        last_updated: Optional[datetime] = None,
    ) -> int:
        """
        Send or edit one message per page.

        Returns the number of messages successfully sent or edited. Failed
        platform calls are logged and skipped; the next cycle tries again.
        """
        if channel is None or not pages:
            return 0

        embeds = [build_leaderboard_embed(page, last_updated) for page in pages]

        try:
            existing = await oldest_first(channel, len(embeds))
        except discord.HTTPException as e:
            logger.error(f"Unable to read rankings channel history: {e}")
            return 0

        published = 0
        if len(existing) < len(embeds):
            for page, embed in zip(pages, embeds):
                try:
                    await channel.send(embed=embed)
                    published += 1
                except discord.HTTPException as e:
                    logger.error(f"Failed to send {page.mode_name} leaderboard: {e}")
        else:
            for message, page, embed in zip(existing, pages, embeds):
                try:
                    await message.edit(embed=embed)
                    published += 1
                except discord.HTTPException as e:
                    logger.error(f"Failed to edit {page.mode_name} leaderboard message {message.id}: {e}")

        logger.debug(f"Published {published}/{len(embeds)} leaderboard pages")
        return published
