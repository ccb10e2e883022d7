"""Input adapters that normalize raw league data."""

from .sleeper import SleeperClient, SleeperError
from .teams import (
    IngestReport,
    TeamRow,
    load_league_from_csv,
    load_team_csv,
    parse_manual_slot,
    rows_to_league,
)

__all__ = [
    "IngestReport",
    "SleeperClient",
    "SleeperError",
    "TeamRow",
    "load_league_from_csv",
    "load_team_csv",
    "parse_manual_slot",
    "rows_to_league",
]
