"""
Weekly matchup pairing and competitiveness ranking.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from config.scoring_rules import COMPETITIVENESS_BANDS, COMPETITIVENESS_FALLBACK
from venues.sleeper.models import League, Matchup

from .models import Competitiveness, CrossLeagueMatchup, MatchupAnalysis


def classify_difference(difference: float) -> Tuple[Competitiveness, int]:
    """Map a point difference to (competitiveness, priority); sign is ignored."""
    gap = abs(difference)
    for upper, label, priority in COMPETITIVENESS_BANDS:
        if gap < upper:
            return label, priority  # type: ignore[return-value]
    label, priority = COMPETITIVENESS_FALLBACK
    return label, priority  # type: ignore[return-value]


def win_chance(difference: float) -> float:
    """Rough percent chance of winning from the current signed margin."""
    if difference > 0:
        return min(95.0, 50.0 + difference / 2.0)
    return max(5.0, 50.0 + difference / 2.0)


def find_pairing(
    matchups: Sequence[Matchup], roster_id: int
) -> Optional[Tuple[Matchup, Matchup]]:
    """
    Return (user_side, opponent_side) for roster_id, or None on a bye.

    A bye is either no row for the roster, a null matchup_id, or a
    matchup_id nobody else shares.
    """
    mine = next((m for m in matchups if m.roster_id == roster_id), None)
    if mine is None or mine.matchup_id is None:
        return None

    opponent = next(
        (
            m
            for m in matchups
            if m.matchup_id == mine.matchup_id and m.roster_id != mine.roster_id
        ),
        None,
    )
    if opponent is None:
        return None
    return mine, opponent


def build_matchup(
    league: League, matchups: Sequence[Matchup], roster_id: int
) -> Optional[CrossLeagueMatchup]:
    pair = find_pairing(matchups, roster_id)
    if pair is None:
        return None

    mine, theirs = pair
    diff = mine.points - theirs.points
    competitiveness, priority = classify_difference(diff)

    return CrossLeagueMatchup(
        league_id=league.league_id,
        league_name=league.name,
        matchup_id=mine.matchup_id,  # type: ignore[arg-type]
        user_roster_id=mine.roster_id,
        opponent_roster_id=theirs.roster_id,
        user_points=mine.points,
        opponent_points=theirs.points,
        projected_difference=diff,
        competitiveness=competitiveness,
        priority=priority,
        win_chance=win_chance(diff),
    )


def rank_matchups(week: int, matchups: Iterable[Optional[CrossLeagueMatchup]]) -> MatchupAnalysis:
    """Drop byes, then sort by priority; sorted() is stable so ties keep input order."""
    valid: List[CrossLeagueMatchup] = [m for m in matchups if m is not None]
    valid = sorted(valid, key=lambda m: m.priority)
    return MatchupAnalysis(week=week, matchups=tuple(valid))
