from .client import SleeperClient
from .errors import SleeperAPIError, UpstreamError, UpstreamRequestError, UpstreamUnreachable
from .models import (
    League,
    LeagueStatus,
    LeagueUser,
    Matchup,
    PlayerRecord,
    Roster,
    SleeperUser,
    TeamRecord,
    TrendingPlayer,
)

__all__ = [
    "SleeperClient",
    "SleeperAPIError",
    "UpstreamError",
    "UpstreamRequestError",
    "UpstreamUnreachable",
    "League",
    "LeagueStatus",
    "LeagueUser",
    "Matchup",
    "PlayerRecord",
    "Roster",
    "SleeperUser",
    "TeamRecord",
    "TrendingPlayer",
]
