"""CSV and JSON export helpers for lottery results."""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from datetime import datetime, timezone
from io import StringIO
from typing import Any, Mapping, Optional, Sequence

from draftlottery.lottery.results import LotteryResult, ProbabilityMatrix
from draftlottery.models import Team, TeamLotteryConfig


RESULT_HEADERS = ("Pick", "Team Name", "Odds (%)", "Was Locked", "Record")


class ExportError(RuntimeError):
    """Raised when a result cannot be rendered against its team list."""


def pick_label(pick: int, round_number: int = 1) -> str:
    return f"{round_number}.{pick:02d}"


def _team_lookup(teams: Sequence[Team]) -> dict[str, Team]:
    return {team.team_id: team for team in teams}


def _resolve(lookup: Mapping[str, Team], team_id: str) -> Team:
    team = lookup.get(team_id)
    if team is None:
        raise ExportError(f"Result references unknown team {team_id}")
    return team


def export_result_to_csv(result: LotteryResult, teams: Sequence[Team]) -> str:
    """Render a draw as ``Pick,Team Name,Odds (%),Was Locked,Record`` rows."""

    lookup = _team_lookup(teams)
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(RESULT_HEADERS)
    for entry in result.picks:
        team = _resolve(lookup, entry.team_id)
        writer.writerow(
            [
                pick_label(entry.pick),
                team.display_name,
                entry.odds_percent,
                "Yes" if entry.was_locked else "No",
                team.record_label,
            ]
        )
    return buffer.getvalue()


def export_result_to_json(
    result: LotteryResult,
    teams: Sequence[Team],
    configs: Mapping[str, TeamLotteryConfig] | None = None,
    *,
    league_id: Optional[str] = None,
    league_name: Optional[str] = None,
    season: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> str:
    lookup = _team_lookup(teams)
    results = []
    for entry in result.picks:
        team = _resolve(lookup, entry.team_id)
        results.append({**asdict(entry), "team_name": team.display_name})

    payload: dict[str, Any] = {
        "league_id": league_id,
        "league_name": league_name or "Unknown League",
        "season": season or "Unknown Season",
        "timestamp": (timestamp or datetime.now(timezone.utc)).isoformat(),
        "results": results,
        "configuration": {
            "teams": [team.model_dump() for team in teams],
            "lottery_configs": {
                team_id: config.model_dump() for team_id, config in (configs or {}).items()
            },
        },
    }
    return json.dumps(payload, indent=2)


def export_matrix_to_csv(matrix: ProbabilityMatrix, teams: Sequence[Team]) -> str:
    """Team x pick percentages, one row per team in the given order."""

    lookup = _team_lookup(teams)
    total_picks = len(teams)
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["Team Name", "Record", *(pick_label(p) for p in range(1, total_picks + 1))])
    for team_id in matrix.rows:
        team = _resolve(lookup, team_id)
        writer.writerow(
            [
                team.display_name,
                team.record_label,
                *(matrix.probability(team_id, p) for p in range(1, total_picks + 1)),
            ]
        )
    return buffer.getvalue()


__all__ = [
    "ExportError",
    "RESULT_HEADERS",
    "export_matrix_to_csv",
    "export_result_to_csv",
    "export_result_to_json",
    "pick_label",
]
