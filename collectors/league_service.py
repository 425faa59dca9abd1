# collectors/league_service.py

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from config.scoring_rules import POSITIONS, WAIVER_DEFAULT_LIMIT
from config.settings import AppSettings, settings as default_settings
from collectors.league_aggregator import LeagueAggregator
from scoring.models import (
    LeagueDiscovery,
    LeagueInfo,
    LeagueRosterReport,
    MatchupReport,
    MultiRosterReport,
    WaiverReport,
)
from storage.player_snapshot import PlayerSnapshotStore, SnapshotStatus
from storage.query_cache import QueryCache
from venues.sleeper.client import SleeperClient
from venues.sleeper.errors import SleeperAPIError
from venues.sleeper.models import PlayerRecord, SleeperUser

logger = logging.getLogger(__name__)

MIN_WEEK = 1
MAX_WEEK = 18


def validate_week(week: int) -> int:
    if not isinstance(week, int) or isinstance(week, bool) or not MIN_WEEK <= week <= MAX_WEEK:
        raise ValueError(f"week must be between {MIN_WEEK} and {MAX_WEEK}, got {week!r}")
    return week


def validate_category(category: Optional[str]) -> Optional[str]:
    if category is None:
        return None
    tag = category.upper()
    if tag not in POSITIONS:
        raise ValueError(f"category must be one of {', '.join(POSITIONS)}, got {category!r}")
    return tag


def validate_limit(limit: int) -> int:
    if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    return limit


@dataclass(frozen=True)
class CacheStatus:
    snapshot: SnapshotStatus
    query_entries: int
    query_hits: int
    query_misses: int


@dataclass(frozen=True)
class ConnectionCheck:
    user_id: str
    season: str
    ok: bool
    leagues: Tuple[str, ...] = ()
    error: Optional[str] = None


class LeagueService:
    """
    Entry points for every multi-league query.

    Owns one QueryCache, one PlayerSnapshotStore and one SleeperClient, and
    hands them to a LeagueAggregator. Principal-scoped calls fall back to the
    configured SLEEPER_USER_ID and season when none is passed.
    """

    def __init__(
        self,
        client: SleeperClient,
        players: PlayerSnapshotStore,
        app_settings: Optional[AppSettings] = None,
    ):
        self.settings = app_settings or default_settings
        self.client = client
        self.cache = client.cache
        self.players = players
        self.aggregator = LeagueAggregator(
            client,
            players,
            trending_lookback_hours=self.settings.trending_lookback_hours,
            trending_limit=self.settings.trending_limit,
        )

    @classmethod
    def from_settings(cls, app_settings: Optional[AppSettings] = None, *, transport=None, clock=None):
        """
        Build the full stack from settings.

        `clock` (if given) drives both cache tiers; `transport` is handed to
        httpx so tests can swap in a MockTransport.
        """
        s = app_settings or default_settings
        clocks = {} if clock is None else {"clock": clock}
        cache = QueryCache(s.cache_ttl_seconds, **clocks)
        players = PlayerSnapshotStore(
            s.player_cache_path, ttl_seconds=s.player_cache_ttl_seconds, **clocks
        )
        client = SleeperClient.from_settings(s, cache, transport=transport)
        logger.debug("[SERVICE] base_url=%s snapshot=%s", s.base_url, s.player_cache_path)
        return cls(client, players, s)

    def _principal(self, user_id: Optional[str], season: Optional[str]):
        return self.settings.require_user_id(user_id), season or self.settings.nfl_season

    # -------------------------
    # Multi-league queries
    # -------------------------
    async def discover_partitions(
        self, user_id: Optional[str] = None, season: Optional[str] = None
    ) -> LeagueDiscovery:
        uid, season = self._principal(user_id, season)
        return await self.aggregator.discover(uid, season)

    async def aggregate_membership(
        self, user_id: Optional[str] = None, season: Optional[str] = None
    ) -> MultiRosterReport:
        uid, season = self._principal(user_id, season)
        return await self.aggregator.analyze_rosters(uid, season)

    async def matchup_priorities(
        self, week: int, user_id: Optional[str] = None, season: Optional[str] = None
    ) -> MatchupReport:
        validate_week(week)
        uid, season = self._principal(user_id, season)
        return await self.aggregator.matchup_priorities(uid, season, week)

    async def waiver_targets(
        self,
        category: Optional[str] = None,
        limit: int = WAIVER_DEFAULT_LIMIT,
        user_id: Optional[str] = None,
        season: Optional[str] = None,
    ) -> WaiverReport:
        tag = validate_category(category)
        validate_limit(limit)
        uid, season = self._principal(user_id, season)
        return await self.aggregator.waiver_targets(uid, season, category=tag, limit=limit)

    # -------------------------
    # Single lookups
    # -------------------------
    async def check_connection(
        self, user_id: Optional[str] = None, season: Optional[str] = None
    ) -> ConnectionCheck:
        """
        Verify Sleeper is reachable and the configured user resolves.

        Upstream failures are reported in the result, not raised; a missing
        user id is still a ConfigurationError.
        """
        uid, season = self._principal(user_id, season)
        try:
            leagues = await self.aggregator.list_leagues(uid, season)
        except SleeperAPIError as exc:
            logger.warning("[SERVICE][WARN] connection check failed user=%s err=%s", uid, exc)
            return ConnectionCheck(user_id=uid, season=season, ok=False, error=str(exc))

        return ConnectionCheck(
            user_id=uid,
            season=season,
            ok=True,
            leagues=tuple(f"{lg.name} ({lg.total_rosters} teams)" for lg in leagues),
        )

    async def lookup_user(self, username: str) -> SleeperUser:
        return await self.client.get_user(username)

    async def league_info(self, league_id: str) -> LeagueInfo:
        return await self.aggregator.league_info(league_id)

    async def league_roster(
        self, league_id: str, roster_id: Optional[int] = None, user_id: Optional[str] = None
    ) -> LeagueRosterReport:
        # Only the "my roster" view needs a principal
        if roster_id is None:
            uid = self.settings.require_user_id(user_id)
        else:
            uid = user_id or self.settings.sleeper_user_id or None
        return await self.aggregator.league_roster(league_id, user_id=uid, roster_id=roster_id)

    async def search_players(self, term: str, limit: int = 10) -> List[PlayerRecord]:
        validate_limit(limit)
        return await self.aggregator.search_players(term, limit=limit)

    # -------------------------
    # Cache verbs
    # -------------------------
    def cache_status(self) -> CacheStatus:
        return CacheStatus(
            snapshot=self.players.status(),
            query_entries=len(self.cache),
            query_hits=self.cache.hits,
            query_misses=self.cache.misses,
        )

    def cache_refresh(self) -> None:
        """Drop the player snapshot; the next enrichment refetches it."""
        self.players.refresh()

    def cache_clear(self) -> None:
        """Drop every ephemeral query result; the player snapshot is kept."""
        self.cache.clear()

    # -------------------------
    # Cleanup
    # -------------------------
    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "LeagueService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

