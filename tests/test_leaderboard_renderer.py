#!/usr/bin/env python3
"""
Tests for leaderboard pagination, entry formatting and embed building.
"""

import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from ctfbot.constants import EmbedLimits, UIConstants
from ctfbot.data_models.stats import AggregateCache, ModeSnapshot
from ctfbot.services.identity_resolver import resolve_player
from ctfbot.services.leaderboard_renderer import LeaderboardRenderer
from ctfbot.services.stats_aggregator import rank_records
from ctfbot.utils.embeds import build_game_status_embed, build_leaderboard_embed, build_ranking_embed
from ctfbot.utils.stat_normalizer import normalize_stats


def ranked_players(count, **counters):
    records = [
        normalize_stats(dict(counters, score=10_000 - i), f"player_{i}")
        for i in range(count)
    ]
    return rank_records(records)


def test_legacy_caps_give_three_full_sections():
    renderer = LeaderboardRenderer(max_displayed=60, rows_per_section=20)
    page = renderer.render(ranked_players(145), "Classic")

    assert len(page.sections) == 3
    assert [s.title for s in page.sections] == ["Top 1-20", "Top 21-40", "Top 41-60"]
    assert [(s.first_place, s.last_place) for s in page.sections] == [(1, 20), (21, 40), (41, 60)]
    assert all(s.entry_count == 20 for s in page.sections)
    assert all(len(s.content.splitlines()) == 20 for s in page.sections)
    assert page.total_players == 145
    assert page.displayed_players == 60


def test_default_caps():
    page = LeaderboardRenderer().render(ranked_players(145), "Classic")

    assert len(page.sections) == 5
    assert page.sections[-1].title == "Top 41-50"


def test_short_mode_gets_partial_last_section():
    page = LeaderboardRenderer(max_displayed=60, rows_per_section=20).render(ranked_players(25), "Classic")

    assert [s.title for s in page.sections] == ["Top 1-20", "Top 21-25"]
    assert page.sections[1].entry_count == 5


def test_empty_mode_has_no_sections():
    page = LeaderboardRenderer().render([], "Classic")
    assert page.sections == ()
    assert page.total_players == 0


def test_section_cap_is_a_programming_error():
    with pytest.raises(AssertionError):
        LeaderboardRenderer(max_displayed=100, rows_per_section=2)


def test_entry_line_contents():
    record = rank_records([normalize_stats({"score": 1234.6, "kills": 7, "deaths": 0}, "cool_guy*")])[0]
    line = LeaderboardRenderer.format_entry(record)

    assert line.startswith("**1.** ")
    assert "cool\\_guy\\*" in line
    assert "Score: *1,235*" in line
    assert line.endswith("K/D: 7.0")


def test_sections_fit_in_embed_fields():
    long_names = [
        normalize_stats({"score": 100 - i, "kills": 123456, "deaths": 7}, "_*~" * 7)
        for i in range(20)
    ]
    page = LeaderboardRenderer(max_displayed=20, rows_per_section=20).render(rank_records(long_names), "Classic")

    assert len(page.sections[0].content) <= EmbedLimits.MAX_FIELD_VALUE
    assert len(page.sections[0].content.splitlines()) == 20


def test_render_is_deterministic():
    players = ranked_players(33)
    renderer = LeaderboardRenderer()
    assert renderer.render(players, "Classic") == renderer.render(players, "Classic")


def test_leaderboard_embed():
    updated = datetime(2024, 5, 1, tzinfo=timezone.utc)
    page = LeaderboardRenderer(max_displayed=60, rows_per_section=20).render(ranked_players(45), "Nade Fight")
    embed = build_leaderboard_embed(page, updated)

    assert embed.description == "# Mode: Nade Fight `[1-60]`"
    assert [field.name for field in embed.fields] == ["Top 1-20", "Top 21-40", "Top 41-45"]
    assert embed.footer.text == UIConstants.LAST_UPDATED_FOOTER
    assert embed.timestamp == updated


def test_ranking_embed_layout():
    records = rank_records([normalize_stats({"score": 500, "kills": 10, "deaths": 4}, "Alice")])
    snapshots = [
        ModeSnapshot.from_ranked(mode, records)
        for mode in ("classes", "classic", "nade_fight")
    ]
    cache = AggregateCache(
        modes={s.display_name: s for s in snapshots},
        players=("Alice",),
        last_updated=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    resolved = resolve_player(cache, explicit_name="alice")
    embed = build_ranking_embed(resolved, cache.last_updated)

    assert embed.description == "## Rankings of Alice"
    assert embed.color.value == UIConstants.GOLD_RANK_COLOR
    # three mode fields, a row break after the second, a filler after the third
    assert [f.name for f in embed.fields] == ["Classes: `1st`", "Classic: `1st`", " ", "Nade Fight: `1st`", " "]
    assert "K/D:" in embed.fields[0].value and "2.5" in embed.fields[0].value


def test_game_status_embed():
    data = {
        "current_map": {"name": "Snow Globe", "start_time": 1_000, "technical_name": "snow_globe"},
        "current_mode": {"matches": 5, "matches_played": 2, "name": "nade_fight"},
        "player_info": {"count": 2, "players": ["under_score", "plain"]},
    }
    embed = build_game_status_embed(data, now=1_000 + 600)

    assert embed.title == "Snow Globe - Nade Fight"
    assert "**Match**: 2/5" in embed.description
    assert "**Duration**: 10m" in embed.description
    assert "under\\_score, plain" in embed.description
    assert embed.image.url.startswith("https://github.com/MT-CTF/seasonal_xmas/")


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
