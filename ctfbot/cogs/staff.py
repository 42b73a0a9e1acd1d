"""
Staff Cog - message relay to the game server and mute/unmute.

All commands require the kick members permission.
"""

from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from ctfbot.config import Config
from ctfbot.constants import UIConstants
from ctfbot.utils.error_embeds import ErrorEmbeds
from ctfbot.utils.formatting import relay_sender_name
from ctfbot.utils.logger import setup_logger

logger = setup_logger(__name__)


def mute_refusal(target: discord.Member, bot_user_id: int) -> Optional[discord.Embed]:
    """Error embed when `target` must not be muted, None when muting is allowed."""
    if target.id == bot_user_id:
        return ErrorEmbeds.bot_mute()
    if target.guild_permissions.kick_members:
        return ErrorEmbeds.staff_mute()
    return None


class StaffCog(commands.Cog):
    """Staff-only moderation and relay commands"""

    def __init__(self, bot):
        self.bot = bot

    def _mute_role(self, guild: discord.Guild) -> Optional[discord.Role]:
        role = discord.utils.get(guild.roles, name=Config.MUTE_ROLE_NAME)
        if role is None:
            logger.error(f"Could not find \"{Config.MUTE_ROLE_NAME}\" role in guild {guild.id}")
        return role

    @app_commands.command(name="x", description="Send messages on staff channel")
    @app_commands.describe(message="Enter message")
    @app_commands.default_permissions(kick_members=True)
    @app_commands.checks.has_permissions(kick_members=True)
    @app_commands.guild_only()
    async def relay_message(self, interaction: discord.Interaction, message: str):
        """Queue a message for the in-game staff channel"""
        member = interaction.user
        sender = relay_sender_name(getattr(member, "nick", None) or member.global_name or member.name)

        self.bot.relay_queue.push(sender, message)
        logger.info(f"Queued staff message from {member}")

        embed = discord.Embed(
            color=UIConstants.DEFAULT_EMBED_COLOR,
            description=f"**{sender}**: {message}",
        )
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="mute", description="Mutes a user")
    @app_commands.describe(user="User to mute")
    @app_commands.default_permissions(kick_members=True)
    @app_commands.checks.has_permissions(kick_members=True)
    @app_commands.guild_only()
    async def mute(self, interaction: discord.Interaction, user: discord.Member):
        role = self._mute_role(interaction.guild)
        if role is None:
            await interaction.response.send_message(embed=ErrorEmbeds.missing_mute_role(Config.MUTE_ROLE_NAME), ephemeral=True)
            return

        refusal = mute_refusal(user, self.bot.user.id)
        if refusal:
            await interaction.response.send_message(embed=refusal, ephemeral=True)
            return

        try:
            await user.add_roles(role, reason=f"Muted by {interaction.user}")
        except discord.HTTPException as e:
            logger.error(f"Failed to mute {user}: {e}")
            await interaction.response.send_message(embed=ErrorEmbeds.command_error("Unable to mute this user."), ephemeral=True)
            return

        logger.info(f"{interaction.user} muted {user}")
        embed = discord.Embed(
            color=UIConstants.DEFAULT_EMBED_COLOR,
            description=f"**{discord.utils.escape_markdown(user.name)}** has been muted.",
        )
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="unmute", description="Unmutes a user")
    @app_commands.describe(user="User to unmute")
    @app_commands.default_permissions(kick_members=True)
    @app_commands.checks.has_permissions(kick_members=True)
    @app_commands.guild_only()
    async def unmute(self, interaction: discord.Interaction, user: discord.Member):
        role = self._mute_role(interaction.guild)
        if role is None:
            await interaction.response.send_message(embed=ErrorEmbeds.missing_mute_role(Config.MUTE_ROLE_NAME), ephemeral=True)
            return

        try:
            await user.remove_roles(role, reason=f"Unmuted by {interaction.user}")
        except discord.HTTPException as e:
            logger.error(f"Failed to unmute {user}: {e}")
            await interaction.response.send_message(embed=ErrorEmbeds.command_error("Unable to unmute this user."), ephemeral=True)
            return

        logger.info(f"{interaction.user} unmuted {user}")
        embed = discord.Embed(
            color=UIConstants.DEFAULT_EMBED_COLOR,
            description=f"**{discord.utils.escape_markdown(user.name)}** has been unmuted.",
        )
        await interaction.response.send_message(embed=embed)


async def setup(bot):
    await bot.add_cog(StaffCog(bot))
