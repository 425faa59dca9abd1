"""
League-level summaries: discovery ordering, overall record, league info.
"""

from __future__ import annotations

from functools import reduce
from typing import Iterable, List, Sequence

from config.scoring_rules import KEY_SCORING_SETTINGS
from venues.sleeper.models import League, Roster, TeamRecord

from .models import LeagueInfo, LeagueSummary


def sort_leagues(leagues: Iterable[LeagueSummary]) -> List[LeagueSummary]:
    """
    In-season leagues first; within each group, leagues with a record by win
    percentage (best first), then leagues without one. Stable otherwise.
    """
    def key(lg: LeagueSummary):
        has_record = lg.record is not None
        pct = lg.record.win_pct if has_record else 0.0
        return (0 if lg.is_active else 1, 0 if has_record else 1, -pct)

    return sorted(leagues, key=key)


def overall_record(leagues: Iterable[LeagueSummary]) -> TeamRecord:
    return reduce(
        lambda acc, rec: acc + rec,
        (lg.record for lg in leagues if lg.record is not None),
        TeamRecord(),
    )


def league_info(league: League, rosters: Sequence[Roster]) -> LeagueInfo:
    owned = [r for r in rosters if r.owner_id]
    total = sum(r.record.points_for for r in owned)
    average = total / len(owned) if owned else 0.0

    key_scoring = {
        label: league.scoring_settings[k]
        for label, k in KEY_SCORING_SETTINGS
        if league.scoring_settings.get(k)
    }

    return LeagueInfo(
        league_id=league.league_id,
        name=league.name,
        status=league.status,
        season=league.season,
        total_rosters=league.total_rosters,
        active_rosters=len(owned),
        total_points=total,
        average_points=average,
        roster_positions=league.roster_positions,
        key_scoring=key_scoring,
        waiver_type=league.settings.get("waiver_type"),
        trade_deadline=league.settings.get("trade_deadline"),
        playoff_week_start=league.settings.get("playoff_week_start"),
    )
