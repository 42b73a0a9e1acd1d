"""
Maps a Discord member (or an explicit name) to in-game stats records.

A member's in-game name is whatever name has a score entry, which may match
their server nickname, their global display name or their account name. The
match is decided per mode, so different modes can resolve through different
identities.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ctfbot.data_models.stats import AggregateCache, StatRecord, normalize_name
from ctfbot.utils.stats_exceptions import PlayerNotFoundError


@dataclass(frozen=True)
class ResolvedPlayer:
    """Records found for one lookup, in mode name order."""
    entries: List[Tuple[StatRecord, str]] = field(default_factory=list)
    display_name: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.entries)

    @property
    def best_place(self) -> float:
        return min(record.place for record, _ in self.entries)

    @property
    def best_score(self) -> float:
        return max(record.score for record, _ in self.entries)


def _present(name: Optional[str]) -> bool:
    return bool(name and name.strip())


def resolve_player(
    cache: AggregateCache,
    explicit_name: Optional[str] = None,
    guild_nickname: Optional[str] = None,
    global_display_name: Optional[str] = None,
    account_name: Optional[str] = None,
) -> ResolvedPlayer:
    """
    Find the stats records for a lookup in every mode.

    An explicit name is looked up on its own, with no fallback. Without one,
    each mode tries the nickname, then the global display name, then the
    account name, and keeps the first hit. Matching is exact after trimming
    and case folding.
    """
    if _present(explicit_name):
        candidates = [explicit_name]
    else:
        candidates = [
            name for name in (guild_nickname, global_display_name, account_name)
            if _present(name)
        ]

    entries: List[Tuple[StatRecord, str]] = []
    for snapshot in cache.snapshots():
        for candidate in candidates:
            record = snapshot.get(candidate)
            if record is not None:
                entries.append((record, snapshot.display_name))
                break

    if entries:
        display_name = entries[0][0].name
    elif candidates:
        display_name = candidates[0].strip()
    else:
        display_name = None

    return ResolvedPlayer(entries=entries, display_name=display_name)


def tried_identities(
    explicit_name: Optional[str] = None,
    guild_nickname: Optional[str] = None,
    global_display_name: Optional[str] = None,
    account_name: Optional[str] = None,
) -> List[str]:
    """Distinct identities a lookup tried, in precedence order."""
    if _present(explicit_name):
        return [explicit_name.strip()]

    names: List[str] = []
    seen = set()
    for name in (guild_nickname, global_display_name, account_name):
        if not _present(name):
            continue
        key = normalize_name(name)
        if key in seen:
            continue
        seen.add(key)
        names.append(name.strip())
    return names


def not_found_error(
    explicit_name: Optional[str] = None,
    guild_nickname: Optional[str] = None,
    global_display_name: Optional[str] = None,
    account_name: Optional[str] = None,
) -> PlayerNotFoundError:
    """Build the NotFound error for a lookup that matched nothing."""
    names = tried_identities(explicit_name, guild_nickname, global_display_name, account_name)
    return PlayerNotFoundError(names or ["you"], explicit=_present(explicit_name))
