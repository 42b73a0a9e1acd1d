import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands

from ctfbot.config import Config
from ctfbot.services.rate_limiter import SimpleRateLimiter
from ctfbot.services.relay import RelayQueue, RelayServer
from ctfbot.services.stats_aggregator import StatsAggregator, StatsCacheService
from ctfbot.services.stats_store import StatsStore
from ctfbot.utils.error_embeds import ErrorEmbeds
from ctfbot.utils.logger import setup_logger
from ctfbot.utils.redis_utils import RedisUtils

class StatsBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None
        )

        # Attach app command error handler
        self.tree.on_error = self.on_app_command_error

        self.redis = None
        self.stats_service: Optional[StatsCacheService] = None
        self.relay_queue = RelayQueue()
        self.relay_server = RelayServer(self.relay_queue, Config.RELAY_HOST, Config.RELAY_PORT)
        self.rate_limiter = SimpleRateLimiter()
        self.logger = setup_logger(__name__)

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up CTF Stats Bot...")

        await self._setup_stats()

        try:
            await self.relay_server.start()
        except OSError as e:
            self.logger.error(f"Failed to start staff message relay: {e}", exc_info=True)

        await self.load_cogs()
        await self._sync_commands()

        self.logger.info("CTF Stats Bot setup complete!")

    async def _setup_stats(self):
        """Connect to the score store and build the first rankings cache"""
        self.redis = await RedisUtils.create_redis_client()
        if self.redis is None:
            self.logger.warning("Score store unavailable, rankings disabled")
            return

        aggregator = StatsAggregator(StatsStore(self.redis))
        self.stats_service = StatsCacheService(aggregator, Config.get_mode_ids())

        # Ranking queries are only served once this first cycle is done
        if await self.stats_service.refresh():
            self.logger.info("Initial rankings loaded")
        else:
            self.logger.warning("Initial rankings refresh failed, will retry on schedule")

    async def load_cogs(self):
        """Load all cogs"""
        cogs_to_load = [
            'ctfbot.cogs.rankings',
            'ctfbot.cogs.staff',
            'ctfbot.cogs.game_status',
        ]

        for cog in cogs_to_load:
            try:
                await self.load_extension(cog)
                self.logger.info(f"Loaded cog: {cog}")
            except Exception as e:
                self.logger.error(f"Failed to load cog {cog}: {e}", exc_info=True)

    async def _sync_commands(self):
        """Sync slash commands with Discord"""
        if not self.tree.get_commands():
            self.logger.warning("No application commands found to sync. Check for cog loading errors.")
            return

        try:
            if Config.DISCORD_GUILD_ID:
                # Guild-specific sync (instant updates)
                guild = discord.Object(id=Config.DISCORD_GUILD_ID)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                self.logger.info(f"Successfully synced {len(synced)} command(s) to guild {Config.DISCORD_GUILD_ID}")
            else:
                # Global sync (can take up to 1 hour)
                self.logger.info("Attempting to sync commands globally... (Note: This can take up to an hour to propagate)")
                synced = await self.tree.sync()
                self.logger.info(f"Successfully synced {len(synced)} command(s) globally")

            for cmd in synced:
                self.logger.info(f"  - {cmd.name}: {cmd.description}")
        except discord.errors.Forbidden:
            self.logger.error("Permission error syncing commands. Ensure the bot has the 'application.commands' scope and is in the guild.", exc_info=True)
        except discord.errors.HTTPException as e:
            self.logger.error(f"HTTP error syncing commands. Status: {e.status}, Response: {e.text}", exc_info=True)

    async def on_ready(self):
        """Called when the bot is ready"""
        self.logger.info(f'Logged in as {self.user}')
        self.logger.info(f'Bot is in {len(self.guilds)} guilds')

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Global error handler for slash commands"""
        command_name = interaction.command.name if interaction.command else 'Unknown'

        # Don't log full traceback for permission errors
        if isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"Permission denied for command '{command_name}' by user {interaction.user}")
            embed = ErrorEmbeds.permission_denied()
        else:
            self.logger.error(f"Error in app command '{command_name}': {error}", exc_info=True)
            embed = ErrorEmbeds.command_error("Something went wrong while processing your command.")

        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send error response: {e}")

    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down CTF Stats Bot...")

        await self.relay_server.stop()
        if self.redis:
            await self.redis.aclose()
            self.redis = None

        await super().close()

async def main():
    """Main entry point"""
    Config.validate()

    bot = StatsBot()

    try:
        await bot.start(Config.DISCORD_TOKEN)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        traceback.print_exc()
    finally:
        await bot.close()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
