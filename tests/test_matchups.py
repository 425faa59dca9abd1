"""Tests for matchup pairing and competitiveness ranking."""
from __future__ import annotations

import pytest

from scoring.matchups import build_matchup, classify_difference, find_pairing, rank_matchups, win_chance
from venues.sleeper.models import League, Matchup

from conftest import league_payload, matchup_payload


def _matchups(*rows) -> list:
    return [Matchup.from_api(matchup_payload(*row)) for row in rows]


@pytest.mark.parametrize(
    ("difference", "label", "priority"),
    [
        (0.0, "high", 1),
        (9.9, "high", 1),
        (-9.9, "high", 1),
        (10.0, "medium", 2),
        (19.99, "medium", 2),
        (20.0, "low", 3),
        (25.0, "low", 3),
        (-25.0, "low", 3),
    ],
)
def test_classify_difference(difference, label, priority) -> None:
    assert classify_difference(difference) == (label, priority)


@pytest.mark.parametrize(
    ("difference", "expected"),
    [(0.0, 50.0), (10.0, 55.0), (-10.0, 45.0), (200.0, 95.0), (-200.0, 5.0)],
)
def test_win_chance_is_clamped(difference, expected) -> None:
    assert win_chance(difference) == expected


def test_pairing_and_byes() -> None:
    rows = _matchups((1, 1, 100.0), (2, 1, 90.0), (3, 2, 80.0), (4, None, 0.0))

    mine, theirs = find_pairing(rows, 1)
    assert (mine.roster_id, theirs.roster_id) == (1, 2)
    # Unshared matchup id, null matchup id and a missing roster are all byes
    assert find_pairing(rows, 3) is None
    assert find_pairing(rows, 4) is None
    assert find_pairing(rows, 99) is None


def test_build_matchup_fields() -> None:
    league = League.from_api(league_payload("A", "Alpha"))
    m = build_matchup(league, _matchups((1, 3, 88.5), (2, 3, 101.0)), 1)

    assert m.league_id == "A"
    assert m.matchup_id == 3
    assert m.opponent_roster_id == 2
    assert m.projected_difference == pytest.approx(-12.5)
    assert (m.competitiveness, m.priority) == ("medium", 2)
    assert m.win_chance == pytest.approx(43.75)


def test_rank_matchups_drops_byes_and_sorts_stably() -> None:
    a = League.from_api(league_payload("A", "Alpha"))
    b = League.from_api(league_payload("B", "Bravo"))
    c = League.from_api(league_payload("C", "Charlie"))
    d = League.from_api(league_payload("D", "Delta"))

    built = [
        build_matchup(a, _matchups((1, 1, 150.0), (2, 1, 100.0)), 1),  # low
        build_matchup(b, _matchups((1, 1, 100.0), (2, 1, 95.0)), 1),   # high
        build_matchup(c, _matchups((1, None, 0.0)), 1),                 # bye
        build_matchup(d, _matchups((1, 1, 100.0), (2, 1, 102.0)), 1),  # high
    ]

    analysis = rank_matchups(7, built)

    assert analysis.week == 7
    assert [m.league_id for m in analysis.matchups] == ["B", "D", "A"]
    assert analysis.total_matchups == 3
    assert [m.league_id for m in analysis.high_priority] == ["B", "D"]
    assert analysis.medium_priority == []
    assert [m.league_id for m in analysis.low_priority] == ["A"]
