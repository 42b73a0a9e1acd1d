"""
Leaderboard pagination and rendering.

Splits the ranked records of a mode into embed-field sized sections. Output is
plain data; the publisher turns pages into embeds.
"""

import math
from typing import List, Sequence

from ctfbot.constants import EmbedLimits, LeaderboardConstants
from ctfbot.data_models.stats import LeaderboardPage, LeaderboardSection, StatRecord
from ctfbot.utils.formatting import escape_player_name, format_kd, format_score
from ctfbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class LeaderboardRenderer:
    """Renders ranked records into a LeaderboardPage."""

    def __init__(
        self,
        max_displayed: int = LeaderboardConstants.MAX_DISPLAYED,
        rows_per_section: int = LeaderboardConstants.ROWS_PER_SECTION,
        max_sections: int = EmbedLimits.MAX_FIELDS,
        max_section_length: int = EmbedLimits.MAX_FIELD_VALUE,
    ):
        assert max_displayed > 0 and rows_per_section > 0, "Leaderboard caps must be positive"
        assert math.ceil(max_displayed / rows_per_section) <= max_sections, (
            f"Discord embeds are limited to {max_sections} fields. "
            f"Tried: {math.ceil(max_displayed / rows_per_section)}"
        )
        self.max_displayed = max_displayed
        self.rows_per_section = rows_per_section
        self.max_sections = max_sections
        self.max_section_length = max_section_length

    def render(self, records: Sequence[StatRecord], mode_name: str) -> LeaderboardPage:
        """Render the top of a mode. `records` must already be ordered by place."""
        shown = list(records[:self.max_displayed])

        sections: List[LeaderboardSection] = []
        for start in range(0, len(shown), self.rows_per_section):
            chunk = shown[start:start + self.rows_per_section]
            first, last = start + 1, start + len(chunk)
            sections.append(LeaderboardSection(
                title=f"Top {first}-{last}",
                content=self._section_content(chunk, mode_name),
                first_place=first,
                last_place=last,
            ))

        assert len(sections) <= self.max_sections, "Leaderboard section cap exceeded"

        return LeaderboardPage(
            mode_name=mode_name,
            sections=tuple(sections),
            total_players=len(records),
            displayed_players=len(shown),
            max_displayed=self.max_displayed,
        )

    @staticmethod
    def format_entry(record: StatRecord, name_length: int = LeaderboardConstants.MAX_NAME_LENGTH) -> str:
        """One leaderboard line: place, escaped name, rounded score and K/D."""
        name = record.name
        if len(name) > name_length:
            name = name[:max(name_length - 1, 1)] + "…"
        return (
            f"**{int(record.place)}.** {escape_player_name(name)}"
            f" - Score: *{format_score(record.score)}*"
            f" - K/D: {format_kd(record.kills, record.deaths)}"
        )

    def _section_content(self, chunk: Sequence[StatRecord], mode_name: str) -> str:
        # Shorten names until the section fits in one embed field
        for name_length in range(LeaderboardConstants.MAX_NAME_LENGTH, 0, -1):
            content = "\n".join(self.format_entry(record, name_length) for record in chunk)
            if len(content) <= self.max_section_length:
                return content

        logger.warning(f"{mode_name} leaderboard section exceeds {self.max_section_length} characters, cutting it")
        return content[:self.max_section_length - 1] + "…"
