"""
Waiver-wire priority across all of a user's leagues.

A candidate is worth more when:
- lots of managers are adding him right now (trending adds)
- he is free in many of the user's leagues
- he is free in a league where the user is thin at his position
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from config.scoring_rules import (
    POSITIONS,
    WAIVER_ACTIVE_BONUS,
    WAIVER_AVAILABLE_WEIGHT,
    WAIVER_DEFAULT_LIMIT,
    WAIVER_ELIGIBLE_STATUSES,
    WAIVER_NEED_THRESHOLD,
    WAIVER_NEED_WEIGHT,
    WAIVER_SCARCITY_BONUS,
    WAIVER_TRENDING_WEIGHT,
)
from venues.sleeper.models import PlayerRecord

from .models import WaiverTarget


@dataclass(frozen=True)
class LeagueWaiverContext:
    """What waiver scoring needs to know about one league."""

    league_id: str
    rostered: FrozenSet[str]          # every player id on any roster
    user_counts: Mapping[str, int]    # the user's rostered count per position

    def needs(self, position: str) -> bool:
        return self.user_counts.get(position, 0) < WAIVER_NEED_THRESHOLD


def is_eligible(player: PlayerRecord, category: Optional[str] = None) -> bool:
    if player.is_placeholder or not player.team:
        return False
    if player.status not in WAIVER_ELIGIBLE_STATUSES:
        return False
    if category is not None:
        return player.position == category
    return player.position in POSITIONS


def score_candidate(
    player: PlayerRecord,
    trending_adds: int,
    leagues: Sequence[LeagueWaiverContext],
) -> Optional[WaiverTarget]:
    """Score one eligible player; None when he is rostered everywhere."""
    available = [lg.league_id for lg in leagues if player.player_id not in lg.rostered]
    if not available:
        return None

    needed = [
        lg.league_id
        for lg in leagues
        if player.player_id not in lg.rostered and lg.needs(player.position)
    ]

    score = (
        trending_adds * WAIVER_TRENDING_WEIGHT
        + len(available) * WAIVER_AVAILABLE_WEIGHT
        + len(needed) * WAIVER_NEED_WEIGHT
        + (WAIVER_ACTIVE_BONUS if player.status == "Active" else 0)
        + WAIVER_SCARCITY_BONUS.get(player.position, 0)
    )

    return WaiverTarget(
        player=player,
        score=score,
        trending_adds=trending_adds,
        available_in=tuple(available),
        needed_in=tuple(needed),
    )


def rank_waiver_targets(
    players: Iterable[PlayerRecord],
    leagues: Sequence[LeagueWaiverContext],
    trending: Mapping[str, int],
    *,
    category: Optional[str] = None,
    limit: int = WAIVER_DEFAULT_LIMIT,
) -> Dict[str, Tuple[WaiverTarget, ...]]:
    """
    Best `limit` targets per position, highest score first.

    Ties break on trending adds, then name, then id, so the ordering is
    deterministic for a given snapshot.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")

    positions = (category,) if category else POSITIONS
    grouped: Dict[str, List[WaiverTarget]] = {pos: [] for pos in positions}

    if leagues:
        for player in players:
            if not is_eligible(player, category):
                continue
            target = score_candidate(player, trending.get(player.player_id, 0), leagues)
            if target is not None:
                grouped[player.position].append(target)

    return {
        pos: tuple(
            sorted(
                targets,
                key=lambda t: (-t.score, -t.trending_adds, t.player.full_name, t.player_id),
            )[:limit]
        )
        for pos, targets in grouped.items()
    }
