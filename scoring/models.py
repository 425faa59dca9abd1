"""
Query-facing result records produced by the scoring engine and aggregator.

Everything here is frozen and free of behavior beyond small derived
properties. These are the structured records handed to callers; turning
them into prose is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from venues.sleeper.models import LeagueStatus, PlayerRecord, TeamRecord


Strength = Literal["Strong", "Average", "Weak"]
Competitiveness = Literal["high", "medium", "low"]


# ---------------------------------------------------------------------------
# Rosters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnrichedPlayer:
    """A roster id joined against the player snapshot."""

    player: PlayerRecord
    is_starter: bool

    @property
    def player_id(self) -> str:
        return self.player.player_id

    @property
    def position(self) -> str:
        return self.player.position

    @property
    def is_placeholder(self) -> bool:
        return self.player.is_placeholder


@dataclass(frozen=True)
class PositionDepth:
    position: str
    starters: Tuple[EnrichedPlayer, ...]
    bench: Tuple[EnrichedPlayer, ...]
    strength: Strength
    depth_score: int

    @property
    def starter_count(self) -> int:
        return len(self.starters)

    @property
    def bench_count(self) -> int:
        return len(self.bench)

    @property
    def total_count(self) -> int:
        return self.starter_count + self.bench_count


@dataclass(frozen=True)
class RosterAnalysis:
    league_id: str
    league_name: str
    league_status: LeagueStatus
    roster_id: int
    record: TeamRecord
    positions: Tuple[PositionDepth, ...]
    starters: Tuple[EnrichedPlayer, ...]
    bench: Tuple[EnrichedPlayer, ...]
    strengths: Tuple[str, ...]
    weaknesses: Tuple[str, ...]
    priority_positions: Tuple[str, ...]
    overall_strength: Strength

    @property
    def total_players(self) -> int:
        return len(self.starters) + len(self.bench)

    @property
    def total_depth_score(self) -> int:
        return sum(p.depth_score for p in self.positions)

    def position(self, name: str) -> Optional[PositionDepth]:
        for p in self.positions:
            if p.position == name:
                return p
        return None


@dataclass(frozen=True)
class TeamDepthRef:
    league_id: str
    league_name: str
    depth_score: int


@dataclass(frozen=True)
class PositionComparison:
    position: str
    strongest_team: TeamDepthRef
    weakest_team: TeamDepthRef
    average_depth: int
    weak_count: int


@dataclass(frozen=True)
class Recommendation:
    position: str
    reason: str
    affected_teams: Tuple[str, ...]


@dataclass(frozen=True)
class TeamRanking:
    league_id: str
    league_name: str
    overall_strength: Strength
    total_depth_score: int
    strengths: Tuple[str, ...]
    weaknesses: Tuple[str, ...]


@dataclass(frozen=True)
class MultiRosterComparison:
    total_teams: int
    total_players: int
    position_analysis: Tuple[PositionComparison, ...]
    overall_recommendations: Tuple[Recommendation, ...]
    team_rankings: Tuple[TeamRanking, ...]


# ---------------------------------------------------------------------------
# Matchups
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CrossLeagueMatchup:
    league_id: str
    league_name: str
    matchup_id: int
    user_roster_id: int
    opponent_roster_id: int
    user_points: float
    opponent_points: float
    projected_difference: float   # user - opponent, signed
    competitiveness: Competitiveness
    priority: int                 # 1 = most attention needed
    win_chance: float             # percent, clamped to [5, 95]


@dataclass(frozen=True)
class MatchupAnalysis:
    week: int
    matchups: Tuple[CrossLeagueMatchup, ...]

    @property
    def total_matchups(self) -> int:
        return len(self.matchups)

    def _by(self, level: str) -> List[CrossLeagueMatchup]:
        return [m for m in self.matchups if m.competitiveness == level]

    @property
    def high_priority(self) -> List[CrossLeagueMatchup]:
        return self._by("high")

    @property
    def medium_priority(self) -> List[CrossLeagueMatchup]:
        return self._by("medium")

    @property
    def low_priority(self) -> List[CrossLeagueMatchup]:
        return self._by("low")


# ---------------------------------------------------------------------------
# Waivers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WaiverTarget:
    player: PlayerRecord
    score: int
    trending_adds: int
    available_in: Tuple[str, ...]   # league_ids where nobody rosters the player
    needed_in: Tuple[str, ...]      # subset of available_in where the user is thin

    @property
    def player_id(self) -> str:
        return self.player.player_id

    @property
    def position(self) -> str:
        return self.player.position


# ---------------------------------------------------------------------------
# Aggregate reports
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnavailableLeague:
    """A league dropped from one aggregation because its fetches failed."""

    league_id: str
    league_name: str
    reason: str


@dataclass(frozen=True)
class LeagueSummary:
    league_id: str
    name: str
    status: LeagueStatus
    season: str
    total_rosters: int
    roster_id: Optional[int] = None
    record: Optional[TeamRecord] = None
    available: bool = True

    @property
    def is_active(self) -> bool:
        return self.status is LeagueStatus.IN_SEASON


@dataclass(frozen=True)
class LeagueDiscovery:
    user_id: str
    season: str
    leagues: Tuple[LeagueSummary, ...]
    overall_record: TeamRecord

    @property
    def total_leagues(self) -> int:
        return len(self.leagues)

    @property
    def active_leagues(self) -> int:
        return sum(1 for lg in self.leagues if lg.is_active)

    @property
    def leagues_with_record(self) -> int:
        return sum(1 for lg in self.leagues if lg.record is not None)


@dataclass(frozen=True)
class MultiRosterReport:
    user_id: str
    season: str
    analyses: Tuple[RosterAnalysis, ...]
    comparison: MultiRosterComparison
    unavailable: Tuple[UnavailableLeague, ...] = ()
    not_member: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchupReport:
    user_id: str
    season: str
    analysis: MatchupAnalysis
    unavailable: Tuple[UnavailableLeague, ...] = ()
    not_member: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WaiverReport:
    user_id: str
    season: str
    by_position: Dict[str, Tuple[WaiverTarget, ...]]
    leagues_considered: Tuple[str, ...]
    trending_available: bool = True
    unavailable: Tuple[UnavailableLeague, ...] = ()
    not_member: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Single-league views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LeagueInfo:
    league_id: str
    name: str
    status: LeagueStatus
    season: str
    total_rosters: int
    active_rosters: int
    total_points: float
    average_points: float
    roster_positions: Tuple[str, ...]
    key_scoring: Dict[str, float]
    waiver_type: Optional[int]
    trade_deadline: Optional[int]
    playoff_week_start: Optional[int]


@dataclass(frozen=True)
class RosterView:
    roster_id: int
    owner_id: Optional[str]
    owner_name: str
    record: TeamRecord
    starters: Tuple[EnrichedPlayer, ...]
    bench: Tuple[EnrichedPlayer, ...]
    is_user: bool = False


@dataclass(frozen=True)
class LeagueRosterReport:
    league_id: str
    league_name: str
    rosters: Tuple[RosterView, ...] = field(default_factory=tuple)
