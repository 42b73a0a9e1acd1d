"""
Stats data models for the rankings engine.

Immutable records produced by one aggregation cycle. A cycle builds a fresh
AggregateCache and the owner swaps the reference; nothing here is mutated
after construction.
"""

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ctfbot.constants import UNRANKED


def normalize_name(name: str) -> str:
    """Lookup key for a player name: trimmed and case-folded."""
    return name.strip().lower()


def mode_display_name(technical_name: str) -> str:
    """
    Return a mode title from a technical name.

    eg: `nade_fight` -> `Nade Fight`
    """
    return " ".join(
        word[:1].upper() + word[1:]
        for word in technical_name.split("_")
        if word
    )


@dataclass(frozen=True)
class StatRecord:
    """One player's counters for one mode."""
    name: str
    score: float = 0
    kills: float = 0
    deaths: float = 0
    bounty_kills: float = 0
    flag_captures: float = 0
    flag_attempts: float = 0
    hp_healed: float = 0
    kill_assists: float = 0
    reward_given_to_enemy: float = 0
    place: float = UNRANKED

    @property
    def is_ranked(self) -> bool:
        return self.place != UNRANKED

    @property
    def kill_death_ratio(self) -> float:
        """Kills per death, zero deaths count as one."""
        return self.kills / (self.deaths or 1)

    @property
    def score_per_kill(self) -> float:
        return self.score / (self.kills or 1)


@dataclass(frozen=True)
class ModeSnapshot:
    """Rankings of one mode at one point in time."""
    technical_name: str
    display_name: str
    ranked: Tuple[StatRecord, ...]
    by_name: Mapping[str, StatRecord]

    @classmethod
    def from_ranked(cls, technical_name: str, ranked: List[StatRecord]) -> "ModeSnapshot":
        by_name: Dict[str, StatRecord] = {}
        for record in ranked:
            # First (best placed) record wins if two names fold to the same key
            by_name.setdefault(normalize_name(record.name), record)
        return cls(
            technical_name=technical_name,
            display_name=mode_display_name(technical_name),
            ranked=tuple(ranked),
            by_name=MappingProxyType(by_name),
        )

    def get(self, name: Optional[str]) -> Optional[StatRecord]:
        if not name or not name.strip():
            return None
        return self.by_name.get(normalize_name(name))

    def __len__(self) -> int:
        return len(self.ranked)


@dataclass(frozen=True)
class AggregateCache:
    """All mode snapshots of one completed cycle."""
    modes: Mapping[str, ModeSnapshot]
    players: Tuple[str, ...]
    last_updated: datetime

    def mode_names(self) -> List[str]:
        """Mode display names in publishing order."""
        return sorted(self.modes)

    def snapshots(self) -> List[ModeSnapshot]:
        return [self.modes[name] for name in self.mode_names()]


@dataclass(frozen=True)
class LeaderboardSection:
    """One embed field of a leaderboard, covering places first..last."""
    title: str
    content: str
    first_place: int
    last_place: int

    @property
    def entry_count(self) -> int:
        return self.last_place - self.first_place + 1


@dataclass(frozen=True)
class LeaderboardPage:
    """Rendered leaderboard of one mode."""
    mode_name: str
    sections: Tuple[LeaderboardSection, ...]
    total_players: int
    displayed_players: int
    max_displayed: int = 0
