"""
Cross-league roster comparison.

Takes every RosterAnalysis the user has this season and answers:
- per position, which team is deepest / thinnest and what the mean depth is
- which positions are thin in several leagues at once
- how the teams rank against each other overall
"""

from __future__ import annotations

from typing import List, Sequence

from config.scoring_rules import CROSS_LEAGUE_WEAK_MIN, POSITIONS

from .models import (
    MultiRosterComparison,
    PositionComparison,
    Recommendation,
    RosterAnalysis,
    TeamDepthRef,
    TeamRanking,
)

_STRENGTH_ORDER = {"Strong": 0, "Average": 1, "Weak": 2}


def _mean_rounded(values: Sequence[int]) -> int:
    if not values:
        return 0
    return int(sum(values) / len(values) + 0.5)


def compare_positions(analyses: Sequence[RosterAnalysis]) -> List[PositionComparison]:
    out: List[PositionComparison] = []
    if not analyses:
        return out

    for pos in POSITIONS:
        rows = []
        for a in analyses:
            depth = a.position(pos)
            if depth is not None:
                rows.append((a, depth))
        if not rows:
            continue

        # Stable sort: the first-encountered team wins a tie at either end
        by_depth = sorted(rows, key=lambda r: -r[1].depth_score)
        strongest_a, strongest_d = by_depth[0]
        weakest = sorted(rows, key=lambda r: r[1].depth_score)[0]
        weakest_a, weakest_d = weakest

        out.append(
            PositionComparison(
                position=pos,
                strongest_team=TeamDepthRef(
                    strongest_a.league_id, strongest_a.league_name, strongest_d.depth_score
                ),
                weakest_team=TeamDepthRef(
                    weakest_a.league_id, weakest_a.league_name, weakest_d.depth_score
                ),
                average_depth=_mean_rounded([d.depth_score for _, d in rows]),
                weak_count=sum(1 for _, d in rows if d.strength == "Weak"),
            )
        )
    return out


def recommendations(analyses: Sequence[RosterAnalysis]) -> List[Recommendation]:
    out: List[Recommendation] = []
    for pos in POSITIONS:
        affected = tuple(a.league_name for a in analyses if pos in a.weaknesses)
        if len(affected) >= CROSS_LEAGUE_WEAK_MIN:
            out.append(
                Recommendation(
                    position=pos,
                    reason=f"Weak {pos} depth in {len(affected)} of {len(analyses)} leagues",
                    affected_teams=affected,
                )
            )
    return out


def rank_teams(analyses: Sequence[RosterAnalysis]) -> List[TeamRanking]:
    ranked = sorted(
        analyses,
        key=lambda a: (_STRENGTH_ORDER[a.overall_strength], -a.total_depth_score),
    )
    return [
        TeamRanking(
            league_id=a.league_id,
            league_name=a.league_name,
            overall_strength=a.overall_strength,
            total_depth_score=a.total_depth_score,
            strengths=a.strengths,
            weaknesses=a.weaknesses,
        )
        for a in ranked
    ]


def compare_rosters(analyses: Sequence[RosterAnalysis]) -> MultiRosterComparison:
    return MultiRosterComparison(
        total_teams=len(analyses),
        total_players=sum(a.total_players for a in analyses),
        position_analysis=tuple(compare_positions(analyses)),
        overall_recommendations=tuple(recommendations(analyses)),
        team_rankings=tuple(rank_teams(analyses)),
    )
