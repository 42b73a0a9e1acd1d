"""
Bot-wide constants for the CTF stats bot.

Discord display limits and leaderboard layout values used by the renderer,
publisher and embed builders.
"""

import math

# Place of a player that was found but never ranked
UNRANKED = math.inf


class StatKeys:
    """Counter names as stored in the score store (`<mode>|<key>` sorted sets)."""

    SCORE = "score"

    # Counters fetched individually per player, besides the score ranking
    COUNTERS = (
        "kills",
        "kill_assists",
        "deaths",
        "bounty_kills",
        "flag_captures",
        "flag_attempts",
        "hp_healed",
        "reward_given_to_enemy",
    )

    ALL = (SCORE,) + COUNTERS


class EmbedLimits:
    """Hard limits imposed by Discord on embeds."""

    MAX_FIELDS = 25
    MAX_FIELD_VALUE = 1024
    MAX_DESCRIPTION = 4096


class LeaderboardConstants:
    """Leaderboard layout."""

    # Players shown per mode (legacy layout showed 60)
    MAX_DISPLAYED = 50

    # Entries per embed field (legacy layout used 20)
    ROWS_PER_SECTION = 10

    # Longest in-game name accepted by the game server
    MAX_NAME_LENGTH = 20

    # Players at or above this place get the gold embed color on /rank
    GOLD_PLACE_THRESHOLD = 20

    # Autocomplete suggestions for /rank
    AUTOCOMPLETE_LIMIT = 10


class UIConstants:
    """Constants for Discord UI elements."""

    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    GOLD_RANK_COLOR = 0xf1c40f      # Gold for top ranked players
    ERROR_COLOR = 0xe74c3c          # Red for errors

    LAST_UPDATED_FOOTER = "Last Updated"
