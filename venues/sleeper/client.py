"""
Sleeper REST API client.

Provides league discovery, per-league reads (metadata, rosters, members,
weekly matchups), trending players and the bulk player dump.

Every per-query read is routed through a QueryCache keyed by the logical
request, so a fan-out over many leagues that asks the same question twice
inside the cache window only reaches Sleeper once. The bulk player dump is
deliberately NOT cached here; it is persisted by storage.player_snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from config.settings import AppSettings, settings as default_settings
from storage.query_cache import QueryCache

from .errors import UpstreamError, UpstreamRequestError, UpstreamUnreachable
from .models import League, LeagueUser, Matchup, Roster, SleeperUser, TrendingPlayer

logger = logging.getLogger(__name__)

TIMEOUT = 10.0
USER_AGENT = "Sleeper-Multileague-Core/1.0"

T = TypeVar("T")


class SleeperClient:
    """
    Async wrapper around the public Sleeper v1 API.

    Focused on:
    - Read-only endpoints (the API is unauthenticated)
    - Mapping transport and status failures onto the venues.sleeper.errors family
    - Returning typed models instead of raw dicts
    """

    def __init__(
        self,
        cache: QueryCache,
        *,
        base_url: Optional[str] = None,
        timeout: float = TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cache = cache
        self.base_url = (base_url or default_settings.base_url).rstrip("/")
        self.http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"accept": "application/json", "User-Agent": USER_AGENT},
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        app_settings: AppSettings,
        cache: Optional[QueryCache] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SleeperClient":
        return cls(
            cache or QueryCache(app_settings.cache_ttl_seconds),
            base_url=app_settings.base_url,
            timeout=app_settings.request_timeout,
            transport=transport,
        )

    # -------------------------
    # Low-level request helper
    # -------------------------
    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"/{path.lstrip('/')}"
        logger.debug("[FETCH] url=%s params=%s", url, params)

        try:
            resp = await self.http.get(url, params=params)
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as exc:
            raise UpstreamUnreachable(
                "No response from Sleeper API - check your internet connection"
            ) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise UpstreamRequestError(f"Request Error: {exc}") from exc

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise UpstreamError(
                status,
                f"Sleeper API Error {status}: {exc.response.reason_phrase}",
                url=str(exc.request.url),
            ) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(
                resp.status_code,
                f"Sleeper API Error {resp.status_code}: response body is not valid JSON",
                url=str(resp.request.url),
            ) from exc

    async def _cached(self, key: str, path: str, params: Optional[dict] = None) -> Any:
        async def fetch():
            return await self._get(path, params=params)

        return await self.cache.get_or_fetch(key, fetch)

    @staticmethod
    def _rows(what: str, payload: Any, build: Callable[[Dict[str, Any]], T]) -> List[T]:
        """Build one model per dict row; a row that does not parse fails the whole read."""
        try:
            return [build(d) for d in payload or [] if isinstance(d, dict)]
        except (TypeError, ValueError) as exc:
            raise UpstreamError(200, f"Sleeper API Error 200: malformed {what} payload ({exc})") from exc

    @staticmethod
    def _one(what: str, payload: Dict[str, Any], build: Callable[[Dict[str, Any]], T]) -> T:
        try:
            return build(payload)
        except (TypeError, ValueError) as exc:
            raise UpstreamError(200, f"Sleeper API Error 200: malformed {what} payload ({exc})") from exc

    # -------------------------
    # User endpoints
    # -------------------------
    async def get_user(self, username: str) -> SleeperUser:
        """Look up a user by username (or user id); Sleeper accepts either."""
        payload = await self._cached(QueryCache.make_key("user", username), f"user/{username}")
        if not isinstance(payload, dict):
            raise UpstreamError(404, f"Sleeper API Error 404: user {username!r} not found")
        return self._one("user", payload, SleeperUser.from_api)

    async def get_user_leagues(self, user_id: str, season: str) -> List[League]:
        """All NFL leagues the user belongs to in one season."""
        payload = await self._cached(
            QueryCache.make_key("user_leagues", user_id, season),
            f"user/{user_id}/leagues/nfl/{season}",
        )
        return self._rows("leagues", payload, League.from_api)

    # -------------------------
    # League endpoints
    # -------------------------
    async def get_league(self, league_id: str) -> League:
        payload = await self._cached(QueryCache.make_key("league", league_id), f"league/{league_id}")
        if not isinstance(payload, dict):
            raise UpstreamError(404, f"Sleeper API Error 404: league {league_id} not found")
        return self._one("league", payload, League.from_api)

    async def get_league_rosters(self, league_id: str) -> List[Roster]:
        payload = await self._cached(
            QueryCache.make_key("rosters", league_id), f"league/{league_id}/rosters"
        )
        return self._rows("rosters", payload, Roster.from_api)

    async def get_league_users(self, league_id: str) -> List[LeagueUser]:
        payload = await self._cached(
            QueryCache.make_key("league_users", league_id), f"league/{league_id}/users"
        )
        return self._rows("league users", payload, LeagueUser.from_api)

    async def get_matchups(self, league_id: str, week: int) -> List[Matchup]:
        payload = await self._cached(
            QueryCache.make_key("matchups", league_id, week),
            f"league/{league_id}/matchups/{week}",
        )
        return self._rows("matchups", payload, Matchup.from_api)

    # -------------------------
    # Player endpoints
    # -------------------------
    async def get_trending_players(
        self, kind: str = "add", *, lookback_hours: int = 24, limit: int = 25
    ) -> List[TrendingPlayer]:
        payload = await self._cached(
            QueryCache.make_key("trending", kind, lookback_hours, limit),
            f"players/nfl/trending/{kind}",
            params={"lookback_hours": lookback_hours, "limit": limit},
        )
        return self._rows("trending", payload, TrendingPlayer.from_api)

    async def get_all_players(self) -> Dict[str, Dict[str, Any]]:
        """
        Fetch the full player dump (several MB, tens of thousands of records).

        Sleeper asks clients to call this at most once a day; callers are
        expected to persist the result through PlayerSnapshotStore.
        """
        payload = await self._get("players/nfl")
        if not isinstance(payload, dict):
            raise UpstreamError(200, "Sleeper API Error 200: player dump is not an object")
        logger.info("[FETCH] players/nfl records=%d", len(payload))
        return payload

    # -------------------------
    # Cleanup
    # -------------------------
    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "SleeperClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
