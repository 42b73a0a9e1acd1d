#!/usr/bin/env python3
"""
Tests for the rankings aggregation cycle and the stats cache owner.

Covers place assignment, per-mode independence, partial and whole-mode read
failures, cycle atomicity and the in-flight guard.
"""

import asyncio
import math
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

import pytest

from ctfbot.services.stats_aggregator import StatsAggregator, StatsCacheService, rank_records
from ctfbot.utils.stat_normalizer import normalize_stats
from ctfbot.utils.stats_exceptions import StatsUnavailableError
from fakes import FakeStore


def build_store():
    rankings = {
        "classic": [("Alice", 300.0), ("bob", 250.0), ("Carol", 250.0), ("dave", 10.0)],
        "nade_fight": [("bob", 80.0), ("Eve", 40.0)],
    }
    counters = {
        ("classic", "kills", "Alice"): 30.0,
        ("classic", "deaths", "Alice"): 10.0,
        ("classic", "flag_captures", "Alice"): 2.0,
        ("classic", "kills", "bob"): 7.0,
        ("nade_fight", "kills", "bob"): 12.0,
        ("nade_fight", "deaths", "bob"): 3.0,
    }
    return FakeStore(rankings, counters)


def test_places_are_contiguous_and_ordered():
    cache = asyncio.run(StatsAggregator(build_store()).aggregate(["classic", "nade_fight"]))

    for snapshot in cache.snapshots():
        places = [record.place for record in snapshot.ranked]
        assert places == list(range(1, len(snapshot) + 1))
        scores = [record.score for record in snapshot.ranked]
        assert scores == sorted(scores, reverse=True)


def test_ties_keep_store_order():
    cache = asyncio.run(StatsAggregator(build_store()).aggregate(["classic"]))
    classic = cache.modes["Classic"]

    assert [record.name for record in classic.ranked] == ["Alice", "bob", "Carol", "dave"]
    assert classic.get("carol").place == 3


def test_rank_records_is_stable():
    records = [normalize_stats({"score": score}, name) for name, score in [("a", 1), ("b", 5), ("c", 1), ("d", 5)]]
    ranked = rank_records(records)

    assert [(r.name, r.place) for r in ranked] == [("b", 1), ("d", 2), ("a", 3), ("c", 4)]
    # Inputs are not mutated
    assert all(math.isinf(r.place) for r in records)


def test_counters_and_lookup():
    cache = asyncio.run(StatsAggregator(build_store()).aggregate(["classic", "nade_fight"]))

    alice = cache.modes["Classic"].get("  ALICE ")
    assert alice.kills == 30
    assert alice.deaths == 10
    assert alice.flag_captures == 2
    assert alice.hp_healed == 0
    assert alice.score == 300

    bob = cache.modes["Nade Fight"].get("Bob")
    assert bob.kills == 12
    assert bob.place == 1


def test_modes_are_independent():
    cache = asyncio.run(StatsAggregator(build_store()).aggregate(["classic", "nade_fight"]))

    assert cache.modes["Classic"].get("eve") is None
    assert cache.modes["Nade Fight"].get("eve").place == 2
    assert cache.modes["Nade Fight"].get("alice") is None


def test_player_list_is_deduplicated_and_sorted():
    cache = asyncio.run(StatsAggregator(build_store()).aggregate(["classic", "nade_fight"]))

    assert list(cache.players) == sorted({"Alice", "bob", "Carol", "dave", "Eve"})
    assert cache.mode_names() == ["Classic", "Nade Fight"]


def test_failed_counter_defaults_to_zero():
    store = build_store()
    store.failing_counters.add(("classic", "kills", "Alice"))

    cache = asyncio.run(StatsAggregator(store).aggregate(["classic"]))
    alice = cache.modes["Classic"].get("alice")

    assert alice.kills == 0
    assert alice.deaths == 10
    assert alice.place == 1


def test_failed_ranking_omits_mode():
    store = build_store()
    store.failing_rankings.add("nade_fight")

    cache = asyncio.run(StatsAggregator(store).aggregate(["classic", "nade_fight"]))

    assert list(cache.modes) == ["Classic"]
    assert "Eve" not in cache.players


def test_cache_unavailable_before_first_cycle():
    service = StatsCacheService(StatsAggregator(build_store()), ["classic"])

    assert not service.is_ready
    assert service.player_names() == ()
    with pytest.raises(StatsUnavailableError) as excinfo:
        service.require_cache()
    assert "still loading" in excinfo.value.user_message


def test_refresh_swaps_cache():
    service = StatsCacheService(StatsAggregator(build_store()), ["classic"])

    assert asyncio.run(service.refresh()) is True
    assert service.is_ready
    assert "Classic" in service.require_cache().modes


def test_failed_cycle_keeps_previous_cache():
    store = build_store()
    service = StatsCacheService(StatsAggregator(store), ["classic", "nade_fight"])
    asyncio.run(service.refresh())
    previous = service.cache

    store.rankings["classic"] = [("Zed", 999.0)]
    store.crashing_rankings.add("nade_fight")

    assert asyncio.run(service.refresh()) is False
    assert service.cache is previous
    assert service.cache.modes["Classic"].get("zed") is None
    assert not service.in_flight


def test_overlapping_refresh_is_skipped():
    store = build_store()
    service = StatsCacheService(StatsAggregator(store), ["classic"])

    async def scenario():
        store.ranking_gate = asyncio.Event()
        first = asyncio.create_task(service.refresh())
        await asyncio.sleep(0)
        assert service.in_flight

        skipped = await service.refresh()
        store.ranking_gate.set()
        return skipped, await first

    skipped, completed = asyncio.run(scenario())

    assert skipped is False
    assert completed is True
    assert store.ranking_calls == 1


def test_modes_discovered_when_not_configured():
    service = StatsCacheService(StatsAggregator(build_store()))

    assert asyncio.run(service.refresh()) is True
    assert service.cache.mode_names() == ["Classic", "Nade Fight"]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
