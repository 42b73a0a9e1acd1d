from discord.ext import commands, tasks

from ctfbot.config import Config
from ctfbot.services.game_status import GameStatusService
from ctfbot.services.leaderboard_publisher import resolve_channel
from ctfbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class GameStatusCog(commands.Cog):
    """Keeps the live game status message up to date"""

    def __init__(self, bot):
        self.bot = bot
        self.service = GameStatusService(Config.GAME_API_URL)

    async def cog_load(self):
        if Config.GAME_STATS_CHANNEL_ID:
            self.update_game_status.start()
            logger.info("GameStatusCog: game status task started")

    async def cog_unload(self):
        self.update_game_status.cancel()
        await self.service.close()

    @tasks.loop(seconds=Config.GAME_STATS_UPDATE_SECONDS)
    async def update_game_status(self):
        try:
            data = await self.service.fetch_status()
            if data is None:
                return

            channel = await resolve_channel(self.bot, Config.GAME_STATS_CHANNEL_ID)
            if channel is None:
                return

            await self.service.publish(data, channel)
        except Exception as e:
            logger.error(f"Error in game status task: {e}", exc_info=True)

    @update_game_status.before_loop
    async def before_update_game_status(self):
        await self.bot.wait_until_ready()


async def setup(bot):
    await bot.add_cog(GameStatusCog(bot))
