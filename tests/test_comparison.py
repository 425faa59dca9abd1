"""Tests for cross-league roster comparison."""
from __future__ import annotations

from scoring.comparison import compare_positions, compare_rosters, rank_teams, recommendations
from scoring.depth import analyze_roster
from venues.sleeper.models import League, Roster

from conftest import USER_ROSTER, USER_STARTERS, league_payload, roster_payload


def _analysis(snapshot, league_id, name, players, starters):
    league = League.from_api(league_payload(league_id, name))
    roster = Roster.from_api(roster_payload(1, "u1", players, starters))
    return analyze_roster(league, roster, snapshot)


def _three(snapshot):
    deep = USER_ROSTER + ["202", "302", "303", "101"]
    return [
        _analysis(snapshot, "A", "Alpha", USER_ROSTER, USER_STARTERS),
        _analysis(snapshot, "B", "Bravo", deep, USER_STARTERS),
        _analysis(snapshot, "C", "Charlie", ["100", "200"], ["100", "200"]),
    ]


def test_position_comparison(snapshot) -> None:
    analyses = _three(snapshot)

    by_pos = {c.position: c for c in compare_positions(analyses)}

    wr = by_pos["WR"]
    assert wr.strongest_team.league_id == "B"
    assert wr.weakest_team.league_id == "C"
    assert wr.weakest_team.depth_score == 0
    # WR depth: A = 4*1.2 -> 5, B = 6*1.2 -> 7, C = 0; mean 4.0
    assert wr.average_depth == 4

    # Tie at the top between A and B for TE keeps the first one seen
    te = by_pos["TE"]
    assert te.strongest_team.league_id == "A"
    assert te.weak_count == 3


def test_recommendations_need_two_weak_rosters(snapshot) -> None:
    recs = {r.position: r for r in recommendations(_three(snapshot))}

    assert recs["TE"].reason == "Weak TE depth in 3 of 3 leagues"
    assert recs["TE"].affected_teams == ("Alpha", "Bravo", "Charlie")
    # Only Charlie is thin at WR
    assert "WR" not in recs


def test_rank_teams(snapshot) -> None:
    ranked = rank_teams(_three(snapshot))

    assert [t.league_id for t in ranked] == ["B", "A", "C"]
    assert ranked[-1].overall_strength == "Weak"


def test_compare_rosters_totals(snapshot) -> None:
    analyses = _three(snapshot)
    cmp = compare_rosters(analyses)

    assert cmp.total_teams == 3
    assert cmp.total_players == sum(a.total_players for a in analyses)
    assert len(cmp.position_analysis) == 6


def test_compare_rosters_empty() -> None:
    cmp = compare_rosters([])

    assert cmp.total_teams == 0
    assert cmp.position_analysis == ()
    assert cmp.overall_recommendations == ()
