"""
Shared embed utilities for the CTF stats bot.

Builds the leaderboard, player ranking and live game status embeds so cogs and
services format things the same way.
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional

import discord

from ctfbot.constants import EmbedLimits, LeaderboardConstants, UIConstants
from ctfbot.data_models.stats import LeaderboardPage, StatRecord, mode_display_name
from ctfbot.services.identity_resolver import ResolvedPlayer
from ctfbot.utils.formatting import ordinal_suffix

# Discord `ansi` code block colors
ANSI_LABEL = "\u001b[1;36m"
ANSI_DIM_LABEL = "\u001b[2;36m"
ANSI_VALUE = "\u001b[1;37m"
ANSI_RESET = "\u001b[0m"


def build_leaderboard_embed(page: LeaderboardPage, last_updated: Optional[datetime]) -> discord.Embed:
    """
    Build the leaderboard embed of one mode.

    Each rendered section becomes one non-inline field, so the section cap
    enforced by the renderer keeps us under Discord's field limit.
    """
    embed = discord.Embed(
        color=UIConstants.DEFAULT_EMBED_COLOR,
        description=f"# Mode: {page.mode_name} `[1-{page.max_displayed}]`",
    )

    if not page.sections:
        embed.description += "\n\nNo player has a score in this mode yet."

    for section in page.sections:
        embed.add_field(name=section.title, value=section.content, inline=False)

    embed.set_footer(text=UIConstants.LAST_UPDATED_FOOTER)
    embed.timestamp = last_updated
    return embed


def format_ranking_field(record: StatRecord, mode_name: str, best_score: float) -> Dict[str, Any]:
    """
    Build the embed field describing one player's stats in one mode.

    Values are right aligned in an ANSI code block, padded to the widest
    number the player has across modes.
    """
    kd = record.kill_death_ratio
    pad = len(str(max(
        round(kd * 100),
        10 ** len(f"{round(best_score):,}"),
        round(record.kill_assists),
        round(record.bounty_kills),
    )))

    def row(label: str, value: str, style: str = ANSI_LABEL, offset: int = 0) -> str:
        return f"{style}{label}{ANSI_RESET}{value.rjust(pad - offset)}"

    score = f"{round(record.score):,}".rjust(pad)
    content = "\n".join([
        "```ansi",
        f"{ANSI_LABEL}Score:       {ANSI_VALUE}{score}{ANSI_RESET}",
        row("Kills:       ", str(round(record.kills))),
        row("HP Healed:   ", str(round(record.hp_healed))),
        row("Kill Assists: ", str(round(record.kill_assists)), offset=1),
        row("Deaths:      ", str(round(record.deaths))),
        row("Bounty Kills: ", str(round(record.bounty_kills)), offset=1),
        row("Captures:    ", str(round(record.flag_captures))),
        row("Attempts:    ", str(round(record.flag_attempts))),
        row("K/D:         ", f"{kd:.1f}", style=ANSI_DIM_LABEL),
        row("Score/Kill:  ", str(round(record.score_per_kill)), style=ANSI_DIM_LABEL),
        "```",
    ])

    return {
        "name": f"{mode_name}: `{ordinal_suffix(record.place)}`",
        "value": content[:EmbedLimits.MAX_FIELD_VALUE],
        "inline": True,
    }


def build_ranking_embed(resolved: ResolvedPlayer, last_updated: Optional[datetime]) -> discord.Embed:
    """Build the /rank embed, two modes per row."""
    color = (
        UIConstants.GOLD_RANK_COLOR
        if resolved.best_place <= LeaderboardConstants.GOLD_PLACE_THRESHOLD
        else UIConstants.DEFAULT_EMBED_COLOR
    )
    embed = discord.Embed(
        color=color,
        description=f"## Rankings of {discord.utils.escape_markdown(resolved.display_name)}",
    )

    best_score = resolved.best_score
    for count, (record, mode_name) in enumerate(resolved.entries, start=1):
        embed.add_field(**format_ranking_field(record, mode_name, best_score))
        if count % 2 == 0:
            embed.add_field(name=" ", value=" ", inline=False)

    # Keep the last field from stretching over the whole row
    if len(resolved.entries) % 2 != 0:
        embed.add_field(name=" ", value=" ", inline=True)

    embed.set_footer(text=UIConstants.LAST_UPDATED_FOOTER)
    embed.timestamp = last_updated
    return embed


def map_image_url(technical_name: str) -> str:
    """Screenshot of a map in its repository."""
    base_url = "https://github.com/MT-CTF/maps/blob/master/"
    if technical_name == "snow_globe":
        base_url = "https://github.com/MT-CTF/seasonal_xmas/blob/master/xmas_maps/maps/"
    return f"{base_url}{technical_name}/screenshot.png?raw=true"


def build_game_status_embed(data: Dict[str, Any], now: Optional[float] = None) -> discord.Embed:
    """Build the live game status embed from the game API payload."""
    now = time.time() if now is None else now
    current_map = data["current_map"]
    current_mode = data["current_mode"]
    player_info = data.get("player_info") or {"count": 0, "players": []}

    duration = round((now - current_map["start_time"]) / 60)
    players = ", ".join(player_info.get("players") or [])
    players = discord.utils.escape_markdown(players)

    embed = discord.Embed(
        color=UIConstants.DEFAULT_EMBED_COLOR,
        title=f"{current_map['name']} - {mode_display_name(current_mode['name'])}",
        description=(
            f"**Match**: {current_mode['matches_played']}/{current_mode['matches']}\n"
            f"**Duration**: {duration}m\n"
            f"**Players ({player_info.get('count', 0)})**: {players}"
        )[:EmbedLimits.MAX_DESCRIPTION],
    )
    embed.set_image(url=map_image_url(current_map["technical_name"]))
    embed.set_footer(text=UIConstants.LAST_UPDATED_FOOTER)
    embed.timestamp = datetime.fromtimestamp(now).astimezone()
    return embed
