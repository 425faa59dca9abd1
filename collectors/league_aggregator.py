"""
Cross-league aggregation.

Fans out per-league reads across every league a user is in, joins rosters
against the player snapshot, and hands the joined data to scoring/.

Responsibilities:
- Discover the user's leagues once per operation
- Load each league concurrently (one task per league, one task per fetch kind)
- Turn a league whose fetches fail into an UnavailableLeague and keep going
- Read-through the player snapshot: load from disk, else fetch and persist

Non-responsibilities:
- Scoring and ordering (scoring/ does that, deterministically)
- Retrying anything; a failed upstream call is final for this invocation
- Formatting results for humans
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from config.scoring_rules import WAIVER_DEFAULT_LIMIT
from scoring.comparison import compare_rosters
from scoring.depth import analyze_roster, enrich_roster, position_counts
from scoring.matchups import build_matchup, rank_matchups
from scoring.models import (
    LeagueDiscovery,
    LeagueInfo,
    LeagueRosterReport,
    LeagueSummary,
    MatchupReport,
    MultiRosterReport,
    RosterView,
    UnavailableLeague,
    WaiverReport,
)
from scoring.standings import league_info, overall_record, sort_leagues
from scoring.waivers import LeagueWaiverContext, rank_waiver_targets
from storage.player_snapshot import CacheCorruption, PlayerSnapshot, PlayerSnapshotStore
from venues.sleeper.client import SleeperClient
from venues.sleeper.errors import SleeperAPIError
from venues.sleeper.models import League, LeagueStatus, LeagueUser, Matchup, PlayerRecord, Roster

logger = logging.getLogger(__name__)


class ReferenceDataUnavailable(RuntimeError):
    """The player dataset could neither be loaded from disk nor fetched."""


@dataclass
class LeagueData:
    """Everything fetched for one league in one fan-out."""

    league: League
    rosters: List[Roster]
    matchups: Optional[List[Matchup]] = None

    def roster_for(self, user_id: str) -> Optional[Roster]:
        return next((r for r in self.rosters if r.owner_id == user_id), None)

    @property
    def rostered_ids(self) -> frozenset:
        return frozenset(pid for r in self.rosters for pid in r.players)


@dataclass
class FanOutResult:
    loaded: List[LeagueData] = field(default_factory=list)
    unavailable: List[UnavailableLeague] = field(default_factory=list)


async def _gather_all(*aws):
    """
    Await every awaitable, then raise the first failure (if any).

    Plain gather() would raise on the first error while siblings keep
    running unobserved; here every task finishes before we decide.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for res in results:
        if isinstance(res, BaseException):
            raise res
    return results


class LeagueAggregator:
    def __init__(
        self,
        client: SleeperClient,
        players: PlayerSnapshotStore,
        *,
        trending_lookback_hours: int = 24,
        trending_limit: int = 100,
    ):
        self.client = client
        self.players = players
        self.trending_lookback_hours = trending_lookback_hours
        self.trending_limit = trending_limit

    # -------------------------
    # Reference data
    # -------------------------
    async def reference_snapshot(self) -> PlayerSnapshot:
        """
        Current player snapshot, fetching and persisting it on a miss.

        Two concurrent misses both fetch; the later save wins.
        """
        snapshot = await asyncio.to_thread(self.players.load)
        if snapshot is not None:
            return snapshot

        logger.info("[AGGREGATE] player snapshot miss, fetching players/nfl")
        try:
            payload = await self.client.get_all_players()
        except SleeperAPIError as exc:
            raise ReferenceDataUnavailable(f"Player data unavailable: {exc}") from exc

        try:
            return await asyncio.to_thread(self.players.save, payload)
        except (OSError, TypeError, ValueError, CacheCorruption) as exc:
            raise ReferenceDataUnavailable(f"Player data could not be cached: {exc}") from exc

    async def search_players(self, term: str, limit: int = 10) -> List[PlayerRecord]:
        snapshot = await self.reference_snapshot()
        return snapshot.search(term, limit=limit)

    # -------------------------
    # Fan-out
    # -------------------------
    async def list_leagues(self, user_id: str, season: str) -> List[League]:
        """Discovery; failures here are fatal to the whole operation."""
        leagues = await self.client.get_user_leagues(user_id, season)
        logger.info("[AGGREGATE] user=%s season=%s leagues=%d", user_id, season, len(leagues))
        return leagues

    async def load_league(self, league_id: str, *, week: Optional[int] = None) -> LeagueData:
        fetches = [
            self.client.get_league(league_id),
            self.client.get_league_rosters(league_id),
        ]
        if week is not None:
            fetches.append(self.client.get_matchups(league_id, week))

        results = await _gather_all(*fetches)
        return LeagueData(
            league=results[0],
            rosters=results[1],
            matchups=results[2] if week is not None else None,
        )

    async def fan_out(self, leagues: Sequence[League], *, week: Optional[int] = None) -> FanOutResult:
        """
        Load every league concurrently.

        Upstream failures mark that league unavailable; anything else is a
        bug and propagates once every sibling has finished. `loaded` keeps
        discovery order regardless of completion order.
        """
        results = await asyncio.gather(
            *(self.load_league(lg.league_id, week=week) for lg in leagues),
            return_exceptions=True,
        )

        out = FanOutResult()
        failure: Optional[BaseException] = None
        for league, res in zip(leagues, results):
            if isinstance(res, SleeperAPIError):
                logger.warning(
                    "[AGGREGATE][WARN] league=%s unavailable err=%s: %s",
                    league.league_id,
                    type(res).__name__,
                    res,
                )
                out.unavailable.append(
                    UnavailableLeague(league.league_id, league.name, f"{type(res).__name__}: {res}")
                )
            elif isinstance(res, BaseException):
                failure = failure or res
            else:
                out.loaded.append(res)

        if failure is not None:
            raise failure
        return out

    def _split_membership(
        self, loaded: Sequence[LeagueData], user_id: str
    ) -> Tuple[List[Tuple[LeagueData, Roster]], List[str]]:
        members: List[Tuple[LeagueData, Roster]] = []
        not_member: List[str] = []
        for data in loaded:
            roster = data.roster_for(user_id)
            if roster is None:
                not_member.append(data.league.league_id)
            else:
                members.append((data, roster))
        return members, not_member

    # -------------------------
    # Operations
    # -------------------------
    async def discover(self, user_id: str, season: str) -> LeagueDiscovery:
        leagues = await self.list_leagues(user_id, season)
        fan = await self.fan_out(leagues)

        loaded: Dict[str, LeagueData] = {d.league.league_id: d for d in fan.loaded}
        summaries: List[LeagueSummary] = []
        for lg in leagues:
            data = loaded.get(lg.league_id)
            if data is None:
                summaries.append(
                    LeagueSummary(
                        league_id=lg.league_id,
                        name=lg.name,
                        status=lg.status,
                        season=lg.season,
                        total_rosters=lg.total_rosters,
                        available=False,
                    )
                )
                continue

            roster = data.roster_for(user_id)
            summaries.append(
                LeagueSummary(
                    league_id=data.league.league_id,
                    name=data.league.name,
                    status=data.league.status,
                    season=data.league.season,
                    total_rosters=data.league.total_rosters,
                    roster_id=roster.roster_id if roster else None,
                    record=roster.record if roster else None,
                )
            )

        ordered = sort_leagues(summaries)
        return LeagueDiscovery(
            user_id=user_id,
            season=season,
            leagues=tuple(ordered),
            overall_record=overall_record(ordered),
        )

    async def analyze_rosters(self, user_id: str, season: str) -> MultiRosterReport:
        leagues = await self.list_leagues(user_id, season)
        snapshot = await self.reference_snapshot()
        fan = await self.fan_out(leagues)

        members, not_member = self._split_membership(fan.loaded, user_id)
        analyses = [analyze_roster(data.league, roster, snapshot) for data, roster in members]
        # In-season leagues first; stable otherwise
        analyses.sort(key=lambda a: 0 if a.league_status is LeagueStatus.IN_SEASON else 1)

        return MultiRosterReport(
            user_id=user_id,
            season=season,
            analyses=tuple(analyses),
            comparison=compare_rosters(analyses),
            unavailable=tuple(fan.unavailable),
            not_member=tuple(not_member),
        )

    async def matchup_priorities(self, user_id: str, season: str, week: int) -> MatchupReport:
        leagues = await self.list_leagues(user_id, season)
        fan = await self.fan_out(leagues, week=week)

        members, not_member = self._split_membership(fan.loaded, user_id)
        built = [
            build_matchup(data.league, data.matchups or [], roster.roster_id)
            for data, roster in members
        ]

        return MatchupReport(
            user_id=user_id,
            season=season,
            analysis=rank_matchups(week, built),
            unavailable=tuple(fan.unavailable),
            not_member=tuple(not_member),
        )

    async def _trending_counts(self) -> Tuple[Dict[str, int], bool]:
        try:
            trending = await self.client.get_trending_players(
                "add", lookback_hours=self.trending_lookback_hours, limit=self.trending_limit
            )
        except SleeperAPIError as exc:
            logger.warning("[AGGREGATE][WARN] trending adds unavailable err=%s", exc)
            return {}, False
        return {t.player_id: t.count for t in trending}, True

    async def waiver_targets(
        self,
        user_id: str,
        season: str,
        *,
        category: Optional[str] = None,
        limit: int = WAIVER_DEFAULT_LIMIT,
    ) -> WaiverReport:
        leagues = await self.list_leagues(user_id, season)
        snapshot = await self.reference_snapshot()
        fan, (trending, trending_ok) = await _gather_all(self.fan_out(leagues), self._trending_counts())

        members, not_member = self._split_membership(fan.loaded, user_id)
        contexts = [
            LeagueWaiverContext(
                league_id=data.league.league_id,
                rostered=data.rostered_ids,
                user_counts=position_counts(roster, snapshot),
            )
            for data, roster in members
        ]

        return WaiverReport(
            user_id=user_id,
            season=season,
            by_position=rank_waiver_targets(
                snapshot, contexts, trending, category=category, limit=limit
            ),
            leagues_considered=tuple(c.league_id for c in contexts),
            trending_available=trending_ok,
            unavailable=tuple(fan.unavailable),
            not_member=tuple(not_member),
        )

    # -------------------------
    # Single-league views
    # -------------------------
    async def league_info(self, league_id: str) -> LeagueInfo:
        data = await self.load_league(league_id)
        return league_info(data.league, data.rosters)

    async def league_roster(
        self,
        league_id: str,
        *,
        user_id: Optional[str] = None,
        roster_id: Optional[int] = None,
    ) -> LeagueRosterReport:
        """
        Roster detail for one league.

        roster_id None -> the user's roster, 0 -> every roster, else that roster.
        """
        snapshot = await self.reference_snapshot()
        data, users = await _gather_all(
            self.load_league(league_id), self.client.get_league_users(league_id)
        )

        if roster_id is None:
            if not user_id:
                raise LookupError("no user configured to pick a roster")
            mine = data.roster_for(user_id)
            if mine is None:
                raise LookupError(f"user {user_id} has no roster in league {league_id}")
            selected = [mine]
        elif roster_id == 0:
            selected = sorted(data.rosters, key=lambda r: r.roster_id)
        else:
            selected = [r for r in data.rosters if r.roster_id == roster_id]
            if not selected:
                raise LookupError(f"roster {roster_id} not found in league {league_id}")

        names = {u.user_id: _owner_label(u) for u in users}
        views = []
        for r in selected:
            enriched = enrich_roster(r, snapshot)
            views.append(
                RosterView(
                    roster_id=r.roster_id,
                    owner_id=r.owner_id,
                    owner_name=names.get(r.owner_id, r.owner_id) if r.owner_id else "Unowned",
                    record=r.record,
                    starters=tuple(p for p in enriched if p.is_starter),
                    bench=tuple(p for p in enriched if not p.is_starter),
                    is_user=bool(user_id) and r.owner_id == user_id,
                )
            )

        return LeagueRosterReport(
            league_id=data.league.league_id,
            league_name=data.league.name,
            rosters=tuple(views),
        )


def _owner_label(user: LeagueUser) -> str:
    if user.team_name:
        return f"{user.display_name} ({user.team_name})"
    return user.display_name or user.user_id
