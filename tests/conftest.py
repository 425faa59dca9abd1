"""Shared fixtures: a fake clock, a fake Sleeper API and sample league data."""
from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from config.settings import AppSettings
from storage.player_snapshot import PlayerSnapshot, PlayerSnapshotStore
from storage.query_cache import QueryCache
from venues.sleeper.client import SleeperClient

BASE_URL = "https://api.sleeper.app/v1"
USER_ID = "u1"
SEASON = "2025"


class FakeClock:
    """Manually advanced clock; starts at wall time so file mtimes line up."""

    def __init__(self, start: Optional[float] = None) -> None:
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleeper:
    """
    Route table behind an httpx.MockTransport.

    Paths are registered without the /v1 prefix. A route is either a JSON
    payload, an (status, payload) tuple, or a callable that receives the
    request (and may raise an httpx exception).
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Any] = {}
        self.calls: List[str] = []

    def add(self, path: str, payload: Any = None, *, status: int = 200) -> None:
        self.routes[path] = (status, payload)

    def fail(self, path: str, exc_factory: Callable[[httpx.Request], Exception]) -> None:
        def raiser(request: httpx.Request):
            raise exc_factory(request)

        self.routes[path] = raiser

    def count(self, path: str) -> int:
        return self.calls.count(path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/v1"):
            path = path[len("/v1"):]
        self.calls.append(path)

        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, text="null")
        if callable(route):
            return route(request)
        status, payload = route
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status, content=payload)
        return httpx.Response(status, content=json.dumps(payload).encode("utf-8"))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# -------------------------
# Payload builders
# -------------------------
def player(pid: str, name: str, position: str, team: Optional[str] = "BUF", **extra) -> Dict[str, Any]:
    first, _, last = name.partition(" ")
    d = {
        "player_id": pid,
        "full_name": name,
        "first_name": first,
        "last_name": last,
        "position": position,
        "team": team,
        "status": "Active",
        "active": True,
        "fantasy_positions": [position],
    }
    d.update(extra)
    return d


def league_payload(league_id: str, name: str, status: str = "in_season", **extra) -> Dict[str, Any]:
    d = {
        "league_id": league_id,
        "name": name,
        "status": status,
        "season": SEASON,
        "season_type": "regular",
        "total_rosters": 2,
        "roster_positions": ["QB", "RB", "RB", "WR", "WR", "TE", "FLEX", "K", "DEF", "BN"],
        "scoring_settings": {"pass_td": 4.0, "rec": 1.0, "rush_td": 6.0, "fum_lost": -2.0},
        "settings": {"waiver_type": 2, "trade_deadline": 11, "playoff_week_start": 15},
    }
    d.update(extra)
    return d


def roster_payload(
    roster_id: int,
    owner_id: Optional[str],
    players: List[str],
    starters: Optional[List[str]] = None,
    wins: int = 0,
    losses: int = 0,
    fpts: int = 0,
) -> Dict[str, Any]:
    return {
        "roster_id": roster_id,
        "owner_id": owner_id,
        "players": players,
        "starters": starters if starters is not None else [],
        "settings": {"wins": wins, "losses": losses, "ties": 0, "fpts": fpts, "fpts_decimal": 0},
    }


def matchup_payload(roster_id: int, matchup_id: Optional[int], points: float) -> Dict[str, Any]:
    return {"roster_id": roster_id, "matchup_id": matchup_id, "points": points, "starters": [], "players": []}


PLAYERS: Dict[str, Dict[str, Any]] = {
    "100": player("100", "Josh Allen", "QB"),
    "101": player("101", "Mac Jones", "QB", team="SF"),
    "200": player("200", "James Cook", "RB"),
    "201": player("201", "Bijan Robinson", "RB", team="ATL"),
    "202": player("202", "Tony Pollard", "RB", team="TEN"),
    "300": player("300", "Justin Jefferson", "WR", team="MIN"),
    "301": player("301", "Ja'Marr Chase", "WR", team="CIN"),
    "302": player("302", "Khalil Shakir", "WR"),
    "303": player("303", "Keon Coleman", "WR"),
    "400": player("400", "Dalton Kincaid", "TE"),
    "500": player("500", "Tyler Bass", "K"),
    "BUF": player("BUF", "Buffalo Bills", "DEF"),
    # Free agents
    "900": player("900", "Tank Bigsby", "RB", team="JAX"),
    "901": player("901", "Jalen McMillan", "WR", team="TB", injury_status="Questionable"),
    "902": player("902", "Noah Fant", "TE", team="SEA", injury_status="Out"),
    "903": player("903", "Kareem Hunt", "RB", team=None),
}

USER_ROSTER = ["100", "200", "201", "300", "301", "400", "500", "BUF"]
USER_STARTERS = ["100", "200", "300", "400", "500", "BUF"]
OTHER_ROSTER = ["101", "202", "302", "303"]


# -------------------------
# Fixtures
# -------------------------
@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper() -> FakeSleeper:
    return FakeSleeper()


@pytest.fixture
def app_settings(tmp_path) -> AppSettings:
    return AppSettings(
        sleeper_user_id=USER_ID,
        nfl_season=SEASON,
        base_url=BASE_URL,
        request_timeout=10.0,
        cache_duration_minutes=5,
        data_dir=tmp_path / "data",
        player_cache_ttl_hours=24,
        trending_lookback_hours=24,
        trending_limit=100,
        log_level="DEBUG",
    )


@pytest.fixture
def snapshot() -> PlayerSnapshot:
    return PlayerSnapshot.from_payload(PLAYERS, taken_at=0.0)


@pytest.fixture
def store(app_settings, clock) -> PlayerSnapshotStore:
    return PlayerSnapshotStore(app_settings.player_cache_path, ttl_seconds=86400, clock=clock)


@pytest_asyncio.fixture
async def client(sleeper, clock):
    c = SleeperClient(QueryCache(300, clock=clock), base_url=BASE_URL, transport=sleeper.transport())
    yield c
    await c.aclose()


@pytest.fixture
def three_leagues(sleeper) -> FakeSleeper:
    """
    u1 is in Alpha, Bravo (both in season) and Charlie (complete).
    u2 owns the other roster everywhere.
    """
    leagues = [
        league_payload("A", "Alpha"),
        league_payload("B", "Bravo"),
        league_payload("C", "Charlie", status="complete"),
    ]
    sleeper.add(f"/user/{USER_ID}/leagues/nfl/{SEASON}", leagues)

    records = {"A": (3, 1, 480), "B": (1, 3, 390), "C": (2, 2, 420)}
    for lg in leagues:
        lid = lg["league_id"]
        wins, losses, fpts = records[lid]
        sleeper.add(f"/league/{lid}", lg)
        sleeper.add(
            f"/league/{lid}/rosters",
            [
                roster_payload(1, USER_ID, USER_ROSTER, USER_STARTERS, wins, losses, fpts),
                roster_payload(2, "u2", OTHER_ROSTER, ["101"], losses, wins, fpts - 10),
            ],
        )
        sleeper.add(
            f"/league/{lid}/users",
            [
                {"user_id": USER_ID, "display_name": "me", "metadata": {"team_name": "Bills Mafia"}},
                {"user_id": "u2", "display_name": "rival", "metadata": {}},
            ],
        )

    sleeper.add("/league/A/matchups/1", [matchup_payload(1, 1, 100.0), matchup_payload(2, 1, 125.0)])
    sleeper.add("/league/B/matchups/1", [matchup_payload(1, 1, 110.0), matchup_payload(2, 1, 105.0)])
    sleeper.add("/league/C/matchups/1", [matchup_payload(1, 1, 90.0), matchup_payload(2, 1, 75.5)])

    sleeper.add("/players/nfl", PLAYERS)
    sleeper.add("/players/nfl/trending/add", [{"player_id": "900", "count": 40}, {"player_id": "901", "count": 12}])
    return sleeper
