"""
Rankings Cog - /rank, /leaders and the periodic leaderboard update.

Reads the shared stats cache; the scheduled update is the only writer.
"""

from typing import List, Optional, Sequence

import discord
from discord import app_commands
from discord.ext import commands, tasks

from ctfbot.config import Config
from ctfbot.constants import LeaderboardConstants, UIConstants
from ctfbot.data_models.stats import AggregateCache
from ctfbot.services.identity_resolver import not_found_error, resolve_player
from ctfbot.services.leaderboard_publisher import LeaderboardPublisher, resolve_channel
from ctfbot.services.leaderboard_renderer import LeaderboardRenderer
from ctfbot.services.rate_limiter import rate_limit
from ctfbot.utils.embeds import build_ranking_embed
from ctfbot.utils.error_embeds import ErrorEmbeds
from ctfbot.utils.logger import setup_logger
from ctfbot.utils.stats_exceptions import StatsUnavailableError

logger = setup_logger(__name__)


def suggest_players(names: Sequence[str], current: str, limit: int = LeaderboardConstants.AUTOCOMPLETE_LIMIT) -> List[str]:
    """Player names starting with what the user typed so far."""
    current = current.strip().lower()
    return [name for name in names if name.lower().startswith(current)][:limit]


def leaders_embed(channel_id: int) -> discord.Embed:
    if channel_id:
        description = f"Check out <#{channel_id}>"
    else:
        description = "There is no rankings channel"
    return discord.Embed(color=UIConstants.DEFAULT_EMBED_COLOR, description=description)


class RankingsCog(commands.Cog):
    """Player rankings and the rankings channel"""

    def __init__(self, bot):
        self.bot = bot
        self.stats = bot.stats_service
        self.renderer = LeaderboardRenderer()
        self.publisher = LeaderboardPublisher()

    async def cog_load(self):
        if self.stats:
            self.update_rankings.start()
            logger.info("RankingsCog: rankings update task started")
        else:
            logger.warning("RankingsCog: stats engine disabled, rankings won't update")

    def cog_unload(self):
        self.update_rankings.cancel()

    def _require_cache(self) -> AggregateCache:
        if self.stats is None:
            raise StatsUnavailableError()
        return self.stats.require_cache()

    @tasks.loop(minutes=Config.RANKINGS_UPDATE_MINUTES)
    async def update_rankings(self):
        """Refresh the stats cache and update the rankings channel"""
        try:
            # The first iteration reuses the cache built during startup
            if self.update_rankings.current_loop > 0 or not self.stats.is_ready:
                await self.stats.refresh()
            await self.publish_leaderboards()
        except Exception as e:
            logger.error(f"Error in rankings update task: {e}", exc_info=True)

    @update_rankings.before_loop
    async def before_update_rankings(self):
        """Wait for the bot to be ready before touching channels"""
        await self.bot.wait_until_ready()

    async def publish_leaderboards(self) -> int:
        cache = self.stats.cache
        if cache is None:
            return 0

        channel = await resolve_channel(self.bot, Config.RANKINGS_CHANNEL_ID)
        if channel is None:
            return 0

        pages = [
            self.renderer.render(snapshot.ranked, snapshot.display_name)
            for snapshot in cache.snapshots()
        ]
        return await self.publisher.publish(pages, channel, cache.last_updated)

    @app_commands.command(name="rank", description="Shows ingame rankings")
    @app_commands.describe(player="The player")
    @app_commands.guild_only()
    @rate_limit("rank", limit=5, window=60)
    async def rank(self, interaction: discord.Interaction, player: Optional[str] = None):
        """Show the rankings of a player, or of the caller"""
        try:
            cache = self._require_cache()
        except StatsUnavailableError as e:
            await interaction.response.send_message(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
            return

        member = interaction.user
        identities = dict(
            explicit_name=player.strip() if player else None,
            guild_nickname=getattr(member, "nick", None),
            global_display_name=member.global_name,
            account_name=member.name,
        )

        resolved = resolve_player(cache, **identities)
        if not resolved.found:
            error = not_found_error(**identities)
            logger.debug(f"/rank by {member}: {error}")
            await interaction.response.send_message(embed=ErrorEmbeds.from_exception(error))
            return

        await interaction.response.send_message(embed=build_ranking_embed(resolved, cache.last_updated))

    @rank.autocomplete('player')
    async def player_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        """Suggest player names from the stats cache"""
        names = self.stats.player_names() if self.stats else ()
        return [app_commands.Choice(name=name, value=name) for name in suggest_players(names, current)]

    @app_commands.command(name="leaders", description="Shows the top leaderboard or links to the dedicated channel for it")
    async def leaders(self, interaction: discord.Interaction):
        await interaction.response.send_message(embed=leaders_embed(Config.RANKINGS_CHANNEL_ID), ephemeral=True)


async def setup(bot):
    await bot.add_cog(RankingsCog(bot))
