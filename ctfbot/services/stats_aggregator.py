"""
Rankings aggregation and the process-wide stats cache.

StatsAggregator turns the raw counters of every mode into ranked snapshots.
StatsCacheService owns the resulting AggregateCache: it runs one cycle at a
time and replaces the cache reference only when a whole cycle succeeded, so
readers always hold a complete snapshot.
"""

import asyncio
import dataclasses
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from ctfbot.constants import StatKeys
from ctfbot.data_models.stats import AggregateCache, ModeSnapshot, StatRecord, mode_display_name
from ctfbot.utils.logger import setup_logger
from ctfbot.utils.stat_normalizer import normalize_stats
from ctfbot.utils.stats_exceptions import StatsUnavailableError, StoreReadError

logger = setup_logger(__name__)


def rank_records(records: List[StatRecord]) -> List[StatRecord]:
    """Sort by score (stable, best first) and assign 1-based places."""
    ordered = sorted(records, key=lambda record: record.score, reverse=True)
    return [
        dataclasses.replace(record, place=index)
        for index, record in enumerate(ordered, start=1)
    ]


class StatsAggregator:
    """Builds an AggregateCache from the score store."""

    def __init__(self, store):
        self.store = store

    async def aggregate(self, mode_ids: Iterable[str]) -> AggregateCache:
        """
        Run one aggregation cycle over the given technical mode ids.

        A mode whose ranking cannot be read is left out of the result. A
        counter that cannot be read defaults to 0. Anything else propagates
        and the caller keeps its previous cache.
        """
        mode_ids = list(dict.fromkeys(mode_ids))
        results = await asyncio.gather(*(self._aggregate_mode(mode) for mode in mode_ids))

        modes: Dict[str, ModeSnapshot] = {}
        players = set()
        for mode, snapshot in zip(mode_ids, results):
            if snapshot is None:
                continue
            modes[snapshot.display_name] = snapshot
            players.update(record.name for record in snapshot.ranked)

        return AggregateCache(
            modes=modes,
            players=tuple(sorted(players)),
            last_updated=datetime.now(timezone.utc),
        )

    async def _aggregate_mode(self, mode: str) -> Optional[ModeSnapshot]:
        try:
            ranking = await self.store.ranking(mode)
        except StoreReadError as e:
            logger.error(f"Omitting {mode_display_name(mode)} from this cycle: {e}")
            return None

        records = await asyncio.gather(
            *(self._player_record(mode, name, score) for name, score in ranking)
        )
        snapshot = ModeSnapshot.from_ranked(mode, rank_records(list(records)))
        logger.debug(f"Aggregated {len(snapshot)} players for {snapshot.display_name}")
        return snapshot

    async def _player_record(self, mode: str, name: str, score: float) -> StatRecord:
        values = await asyncio.gather(
            *(self.store.counter(mode, stat, name) for stat in StatKeys.COUNTERS),
            return_exceptions=True,
        )

        raw_fields = {StatKeys.SCORE: score}
        for stat, value in zip(StatKeys.COUNTERS, values):
            if isinstance(value, StoreReadError):
                logger.warning(f"Defaulting {stat} of {name} in {mode} to 0: {value}")
                continue
            if isinstance(value, BaseException):
                raise value
            raw_fields[stat] = value

        return normalize_stats(raw_fields, name)


class StatsCacheService:
    """Single owner of the rankings cache."""

    def __init__(self, aggregator: StatsAggregator, mode_ids: Optional[List[str]] = None):
        self.aggregator = aggregator
        self.mode_ids = list(mode_ids or [])
        self._cache: Optional[AggregateCache] = None
        self._in_flight = False

    @property
    def cache(self) -> Optional[AggregateCache]:
        return self._cache

    @property
    def is_ready(self) -> bool:
        return self._cache is not None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def require_cache(self) -> AggregateCache:
        """Current cache, raises StatsUnavailableError before the first cycle."""
        cache = self._cache
        if cache is None:
            raise StatsUnavailableError()
        return cache

    def player_names(self) -> Tuple[str, ...]:
        cache = self._cache
        return cache.players if cache else ()

    async def refresh(self) -> bool:
        """
        Run one aggregation cycle and swap the cache on success.

        Returns False when the cycle was skipped because another one is still
        running, or when it failed (the previous cache stays in effect).
        """
        if self._in_flight:
            logger.warning("Previous stats refresh still running, skipping this one")
            return False

        self._in_flight = True
        try:
            mode_ids = self.mode_ids or await self.aggregator.store.mode_ids()
            new_cache = await self.aggregator.aggregate(mode_ids)
        except Exception as e:
            logger.error(f"Stats refresh failed, keeping previous cache: {e}", exc_info=True)
            return False
        finally:
            self._in_flight = False

        self._cache = new_cache
        logger.info(
            f"Stats cache updated: {len(new_cache.modes)} modes, {len(new_cache.players)} players"
        )
        return True
