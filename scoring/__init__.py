"""Pure ranking and scoring functions over aggregated league data."""

from .comparison import compare_rosters
from .depth import analyze_roster, enrich_roster
from .matchups import build_matchup, classify_difference, rank_matchups
from .standings import league_info, overall_record, sort_leagues
from .waivers import LeagueWaiverContext, rank_waiver_targets

__all__ = [
    "compare_rosters",
    "analyze_roster",
    "enrich_roster",
    "build_matchup",
    "classify_difference",
    "rank_matchups",
    "league_info",
    "overall_record",
    "sort_leagues",
    "LeagueWaiverContext",
    "rank_waiver_targets",
]
