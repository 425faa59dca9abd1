"""
Domain models for Sleeper API payloads.

These are thin, mostly-passive data models whose purpose is to:
- Provide stable, typed access to the fields the analysis depends on
- Preserve the full raw API payload for anything not modeled here

Design notes:
- Models are frozen; a refreshed payload produces a new object.
- Every model is built through `from_api`, which tolerates missing or null
  fields rather than failing on schema drift.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


PLACEHOLDER_POSITION = "UNK"
PLACEHOLDER_STATUS = "Unavailable"


def _str_tuple(values: Any) -> Tuple[str, ...]:
    if not values:
        return ()
    return tuple(str(v) for v in values if v is not None)


def _num(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class LeagueStatus(str, Enum):
    """
    League lifecycle as reported by Sleeper.

    Strictly forward: pre_draft -> drafting -> in_season -> complete.
    The core never transitions it; it only sorts and branches on it.
    """

    PRE_DRAFT = "pre_draft"
    DRAFTING = "drafting"
    IN_SEASON = "in_season"
    COMPLETE = "complete"

    @classmethod
    def parse(cls, value: Any) -> "LeagueStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.PRE_DRAFT


@dataclass(frozen=True)
class SleeperUser:
    user_id: str
    username: str
    display_name: str
    avatar: Optional[str]
    raw: Dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "SleeperUser":
        return cls(
            user_id=str(d.get("user_id") or ""),
            username=d.get("username") or "",
            display_name=d.get("display_name") or d.get("username") or "",
            avatar=d.get("avatar"),
            raw=d,
        )


@dataclass(frozen=True)
class League:
    """
    One fantasy league.

    scoring_settings is sparse: a missing key means the league does not score it.
    roster_positions is the ordered list of required lineup slots.
    """

    league_id: str
    name: str
    status: LeagueStatus
    season: str
    season_type: str
    total_rosters: int
    scoring_settings: Dict[str, float]
    roster_positions: Tuple[str, ...]
    settings: Dict[str, Any]
    raw: Dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "League":
        scoring = d.get("scoring_settings") or {}
        return cls(
            league_id=str(d.get("league_id") or ""),
            name=d.get("name") or "",
            status=LeagueStatus.parse(d.get("status")),
            season=str(d.get("season") or ""),
            season_type=d.get("season_type") or "regular",
            total_rosters=int(d.get("total_rosters") or 0),
            scoring_settings={k: _num(v) for k, v in scoring.items()},
            roster_positions=_str_tuple(d.get("roster_positions")),
            settings=dict(d.get("settings") or {}),
            raw=d,
        )

    @property
    def is_active(self) -> bool:
        return self.status is LeagueStatus.IN_SEASON


@dataclass(frozen=True)
class TeamRecord:
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0

    @property
    def decisions(self) -> int:
        return self.wins + self.losses

    @property
    def win_pct(self) -> float:
        """Wins over wins+losses (ties ignored); 0.0 before any decision."""
        if self.decisions == 0:
            return 0.0
        return self.wins / self.decisions

    def __add__(self, other: "TeamRecord") -> "TeamRecord":
        return TeamRecord(
            wins=self.wins + other.wins,
            losses=self.losses + other.losses,
            ties=self.ties + other.ties,
            points_for=self.points_for + other.points_for,
            points_against=self.points_against + other.points_against,
        )

    @classmethod
    def from_settings(cls, s: Dict[str, Any]) -> "TeamRecord":
        # Sleeper splits points into integer and hundredths fields
        return cls(
            wins=int(s.get("wins") or 0),
            losses=int(s.get("losses") or 0),
            ties=int(s.get("ties") or 0),
            points_for=_num(s.get("fpts")) + _num(s.get("fpts_decimal")) / 100.0,
            points_against=_num(s.get("fpts_against")) + _num(s.get("fpts_against_decimal")) / 100.0,
        )


@dataclass(frozen=True)
class Roster:
    """
    One team's membership in a league.

    owner_id is None for unclaimed slots. starters is a subset of players;
    Sleeper pads empty lineup slots with "0", which is dropped here.
    """

    roster_id: int
    owner_id: Optional[str]
    players: Tuple[str, ...]
    starters: Tuple[str, ...]
    record: TeamRecord
    raw: Dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "Roster":
        owner = d.get("owner_id")
        return cls(
            roster_id=int(d.get("roster_id") or 0),
            owner_id=str(owner) if owner else None,
            players=_str_tuple(d.get("players")),
            starters=tuple(p for p in _str_tuple(d.get("starters")) if p != "0"),
            record=TeamRecord.from_settings(d.get("settings") or {}),
            raw=d,
        )

    @property
    def bench(self) -> Tuple[str, ...]:
        starters = set(self.starters)
        return tuple(p for p in self.players if p not in starters)


@dataclass(frozen=True)
class Matchup:
    """
    One roster's side of a weekly head-to-head.

    Two Matchup rows sharing matchup_id form a pairing. matchup_id None means
    the roster has a bye that week.
    """

    matchup_id: Optional[int]
    roster_id: int
    points: float
    starters: Tuple[str, ...]
    players: Tuple[str, ...]
    raw: Dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "Matchup":
        mid = d.get("matchup_id")
        return cls(
            matchup_id=int(mid) if mid is not None else None,
            roster_id=int(d.get("roster_id") or 0),
            points=_num(d.get("points")),
            starters=_str_tuple(d.get("starters")),
            players=_str_tuple(d.get("players")),
            raw=d,
        )


@dataclass(frozen=True)
class LeagueUser:
    """A league member (principal) as listed by /league/{id}/users."""

    user_id: str
    display_name: str
    team_name: Optional[str]
    raw: Dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "LeagueUser":
        metadata = d.get("metadata") or {}
        return cls(
            user_id=str(d.get("user_id") or ""),
            display_name=d.get("display_name") or "",
            team_name=metadata.get("team_name"),
            raw=d,
        )


@dataclass(frozen=True)
class TrendingPlayer:
    player_id: str
    count: int

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "TrendingPlayer":
        return cls(player_id=str(d.get("player_id") or ""), count=int(d.get("count") or 0))


@dataclass(frozen=True)
class PlayerRecord:
    """
    One entry of the player reference dataset.

    status is the effective availability: the injury designation when one is
    set ("Questionable", "Out", "IR", ...), otherwise the roster status.
    Placeholders stand in for ids missing from the current snapshot.
    """

    player_id: str
    full_name: str
    first_name: str
    last_name: str
    position: str
    team: Optional[str]
    status: str
    fantasy_positions: Tuple[str, ...]
    is_placeholder: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, player_id: str, d: Dict[str, Any]) -> "PlayerRecord":
        first = d.get("first_name") or ""
        last = d.get("last_name") or ""
        full = d.get("full_name") or " ".join(p for p in (first, last) if p)
        status = d.get("injury_status") or d.get("status")
        if not status:
            status = "Active" if d.get("active") else "Inactive"
        return cls(
            player_id=str(d.get("player_id") or player_id),
            full_name=full or str(player_id),
            first_name=first,
            last_name=last,
            position=d.get("position") or PLACEHOLDER_POSITION,
            team=d.get("team") or None,
            status=status,
            fantasy_positions=_str_tuple(d.get("fantasy_positions")),
            raw=d,
        )

    @classmethod
    def placeholder(cls, player_id: str) -> "PlayerRecord":
        return cls(
            player_id=str(player_id),
            full_name=f"Unknown Player ({player_id})",
            first_name="",
            last_name="",
            position=PLACEHOLDER_POSITION,
            team=None,
            status=PLACEHOLDER_STATUS,
            fantasy_positions=(),
            is_placeholder=True,
        )
