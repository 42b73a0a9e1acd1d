"""
Centralized error embeds for consistent error handling across the stats bot.
"""

import discord

from ctfbot.constants import UIConstants
from ctfbot.utils.stats_exceptions import StatsException


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""

    @staticmethod
    def _red(description: str) -> discord.Embed:
        return discord.Embed(color=UIConstants.ERROR_COLOR, description=description)

    @staticmethod
    def from_exception(error: StatsException) -> discord.Embed:
        """Create embed carrying the user-facing message of a stats error."""
        return ErrorEmbeds._red(error.user_message)

    @staticmethod
    def staff_mute() -> discord.Embed:
        """Create embed for attempts to mute a staff member."""
        return ErrorEmbeds._red("The user you are trying to mute is a staff member!")

    @staticmethod
    def bot_mute() -> discord.Embed:
        """Create embed for attempts to mute the bot itself."""
        return ErrorEmbeds._red("No. You can't do that.")

    @staticmethod
    def missing_mute_role(role_name: str) -> discord.Embed:
        return ErrorEmbeds._red(f"Could not find the \"{role_name}\" role in this server.")

    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Create embed for general command errors."""
        return ErrorEmbeds._red(f"An error occurred: {error}\n\nPlease try again or contact a staff member.")

    @staticmethod
    def permission_denied() -> discord.Embed:
        """Create embed for permission errors."""
        return ErrorEmbeds._red("You don't have permission to perform this action.")

    @staticmethod
    def rate_limited(command: str) -> discord.Embed:
        """Create embed for rate limiting errors."""
        return discord.Embed(
            color=discord.Color.orange(),
            description=f"You're using `/{command}` too quickly. Please wait a moment and try again.",
        )
