"""Tests for roster enrichment and positional depth."""
from __future__ import annotations

import pytest

from scoring.depth import (
    analyze_roster,
    depth_score,
    enrich_roster,
    overall_strength,
    position_counts,
    strength_tier,
)
from venues.sleeper.models import League, Roster

from conftest import USER_ROSTER, USER_STARTERS, league_payload, roster_payload


def _roster(players, starters=None, **kw) -> Roster:
    return Roster.from_api(roster_payload(1, "u1", players, starters, **kw))


def test_enrichment_is_total(snapshot) -> None:
    roster = _roster(["100", "ghost-1", "200", "ghost-2"], ["100", "ghost-1"])

    enriched = enrich_roster(roster, snapshot)

    assert len(enriched) == len(roster.players)
    assert [p.player_id for p in enriched] == ["100", "ghost-1", "200", "ghost-2"]
    assert [p.is_placeholder for p in enriched] == [False, True, False, True]
    assert enriched[1].is_starter
    assert enriched[1].player.full_name == "Unknown Player (ghost-1)"


@pytest.mark.parametrize(
    ("position", "starters", "bench", "expected"),
    [
        ("QB", 1, 0, 2),   # 3 * 0.8 = 2.4
        ("QB", 1, 1, 3),   # 4 * 0.8 = 3.2
        ("RB", 2, 1, 8),   # 7 * 1.2 = 8.4
        ("RB", 1, 1, 5),   # 4 * 1.2 = 4.8
        ("WR", 0, 0, 0),
        ("TE", 1, 2, 5),
        ("K", 1, 0, 3),
    ],
)
def test_depth_score(position, starters, bench, expected) -> None:
    assert depth_score(position, starters, bench) == expected


@pytest.mark.parametrize(
    ("position", "count", "expected"),
    [
        ("QB", 2, "Strong"),
        ("QB", 1, "Average"),
        ("QB", 0, "Weak"),
        ("DEF", 1, "Average"),
        ("RB", 4, "Strong"),
        ("RB", 3, "Average"),
        ("RB", 2, "Average"),
        ("RB", 1, "Weak"),
        ("TE", 1, "Weak"),
    ],
)
def test_strength_tier(position, count, expected) -> None:
    assert strength_tier(position, count) == expected


def test_overall_strength() -> None:
    assert overall_strength(["Strong"] * 4 + ["Weak", "Average"]) == "Strong"
    assert overall_strength(["Strong"] * 4 + ["Weak", "Weak"]) == "Average"
    assert overall_strength(["Weak"] * 3 + ["Strong"] * 3) == "Weak"
    assert overall_strength(["Average"] * 6) == "Average"


def test_analyze_roster(snapshot) -> None:
    league = League.from_api(league_payload("A", "Alpha"))
    roster = _roster(USER_ROSTER + ["ghost"], USER_STARTERS, wins=3, losses=1)

    analysis = analyze_roster(league, roster, snapshot)

    assert analysis.total_players == len(USER_ROSTER) + 1
    assert analysis.record.win_pct == 0.75

    rb = analysis.position("RB")
    assert (rb.starter_count, rb.bench_count) == (1, 1)
    assert rb.strength == "Average"
    assert rb.depth_score == 5

    # QB/K/DEF have one each (Average); TE has one (Weak); RB/WR have two (Average)
    assert analysis.strengths == ()
    assert analysis.weaknesses == ("TE",)
    assert analysis.priority_positions == ("TE",)
    assert analysis.overall_strength == "Average"
    # The placeholder is listed on the bench but counted in no position
    assert sum(p.total_count for p in analysis.positions) == len(USER_ROSTER)


def test_priority_orders_weak_positions_by_depth(snapshot) -> None:
    league = League.from_api(league_payload("A", "Alpha"))
    # RB: one starter (score 4); TE: none (0); WR: one bench (1)
    roster = _roster(["200", "302"], ["200"])

    analysis = analyze_roster(league, roster, snapshot)

    assert analysis.weaknesses == ("QB", "RB", "WR", "TE", "K", "DEF")
    assert analysis.priority_positions[-2:] == ("WR", "RB")
    assert analysis.overall_strength == "Weak"


def test_position_counts_ignore_unknown_ids(snapshot) -> None:
    counts = position_counts(_roster(["100", "101", "ghost", "900"]), snapshot)

    assert counts["QB"] == 2
    assert counts["RB"] == 1
    assert counts["TE"] == 0
    assert set(counts) == {"QB", "RB", "WR", "TE", "K", "DEF"}
