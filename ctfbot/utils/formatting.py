"""
Small text helpers shared by the embed builders and the leaderboard renderer.
"""

import math

import discord


def ordinal_suffix(place) -> str:
    """Take a place, return it with its ordinal suffix (1st, 2nd, 11th...)."""
    if place is None or (isinstance(place, float) and math.isinf(place)):
        return "Unranked"
    place = int(place)
    j, k = place % 10, place % 100
    if j == 1 and k != 11:
        return f"{place}st"
    if j == 2 and k != 12:
        return f"{place}nd"
    if j == 3 and k != 13:
        return f"{place}rd"
    return f"{place}th"


def format_kd(kills: float, deaths: float) -> str:
    """K/D with one decimal, zero deaths count as one."""
    return f"{(kills or 0) / (deaths or 1):.1f}"


def format_score(score: float) -> str:
    return f"{round(score):,}"


def escape_player_name(name: str) -> str:
    """Escape characters Discord would render as markdown (`_`, `*`, `~`...)."""
    return discord.utils.escape_markdown(name)


def relay_sender_name(name: str) -> str:
    """Strip a Discord display name down to characters the game chat accepts."""
    return "".join(ch for ch in name if ch.isascii() and (ch.isalnum() or ch in "_-"))
