"""Helpers to load league standings CSVs and emit canonical team records."""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from draftlottery.config import AllocationRules
from draftlottery.lottery.allocator import allocate_balls
from draftlottery.models import Team, TeamLotteryConfig


logger = logging.getLogger(__name__)

_SLOT_PATTERN = re.compile(r"^(\d+)\.(\d+)$")


class TeamRow(BaseModel):
    raw_id: Optional[str] = None
    raw_name: str = ""
    raw_wins: str = "0"
    raw_losses: str = "0"
    raw_ties: str = "0"
    raw_playoffs: Optional[str] = None
    raw_included: Optional[str] = None
    raw_balls: Optional[str] = None
    raw_locked: Optional[str] = None
    raw_manual_pick: Optional[str] = None
    raw_target_percent: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "TeamRow":
        def extract(key: str, *, default: Optional[str] = None) -> Optional[str]:
            column = mapping.get(key)
            if column is None:
                return default
            value = row.get(column)
            if value is None:
                return default
            value = value.strip()
            return value if value else default

        return cls(
            raw_id=extract("team_id"),
            raw_name=extract("name", default="") or "",
            raw_wins=extract("wins", default="0") or "0",
            raw_losses=extract("losses", default="0") or "0",
            raw_ties=extract("ties", default="0") or "0",
            raw_playoffs=extract("made_playoffs"),
            raw_included=extract("included"),
            raw_balls=extract("balls"),
            raw_locked=extract("locked"),
            raw_manual_pick=extract("manual_pick"),
            raw_target_percent=extract("target_percent"),
        )


DEFAULT_TEAM_MAPPING = {
    "team_id": "team_id",
    "name": "name",
    "wins": "wins",
    "losses": "losses",
    "ties": "ties",
    "made_playoffs": "made_playoffs",
    "included": "included",
    "balls": "balls",
    "locked": "locked",
    "manual_pick": "manual_pick",
    "target_percent": "target_percent",
}


@dataclass(frozen=True)
class IngestReport:
    total_rows: int
    teams_loaded: int
    defaulted_balls: List[str] = field(default_factory=list)
    skipped_rows: List[str] = field(default_factory=list)


def load_team_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[TeamRow]:
    mapping = mapping or DEFAULT_TEAM_MAPPING
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [TeamRow.from_mapping(row, mapping) for row in reader]
    return rows


def parse_manual_slot(value: str | int | None) -> Optional[int]:
    """Return the pick number for ``"1.04"`` style slots or a bare number."""

    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = value.strip()
    if not text:
        return None
    match = _SLOT_PATTERN.match(text)
    if match:
        return int(match.group(2))
    if text.isdigit():
        return int(text)
    raise ValueError(f"manual pick '{value}' is not a pick number or round.pick slot")


def _parse_count(raw: str, label: str) -> int:
    text = raw.strip()
    try:
        value = int(float(text))
    except ValueError:
        raise ValueError(f"{label} '{raw}' is not numeric") from None
    if value < 0:
        raise ValueError(f"{label} '{raw}' is negative")
    return value


def _parse_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    text = value.strip().lower()
    if not text:
        return None
    if text in {"1", "true", "t", "yes", "y", "x"}:
        return True
    if text in {"0", "false", "f", "no", "n"}:
        return False
    return None


def _parse_percent(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    text = value.strip().rstrip("%")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"target percent '{value}' is not numeric") from None


def rows_to_league(
    rows: Sequence[TeamRow],
    *,
    rules: AllocationRules | None = None,
) -> Tuple[List[Team], Dict[str, TeamLotteryConfig], IngestReport]:
    """Build teams and lottery configs from CSV rows.

    A blank ``included`` column means "in the lottery unless the team made the
    playoffs". Included teams with a blank ``balls`` column get the default
    allocation computed over all included teams.
    """

    teams: List[Team] = []
    settings: Dict[str, dict] = {}
    skipped: List[str] = []

    for index, row in enumerate(rows, start=1):
        team_id = row.raw_id or row.raw_name
        if not team_id:
            skipped.append(f"row {index}: missing team id and name")
            continue
        if team_id in settings:
            skipped.append(f"row {index}: duplicate team {team_id}")
            continue
        try:
            made_playoffs = bool(_parse_flag(row.raw_playoffs))
            team = Team(
                team_id=team_id,
                name=row.raw_name,
                wins=_parse_count(row.raw_wins, "wins"),
                losses=_parse_count(row.raw_losses, "losses"),
                ties=_parse_count(row.raw_ties, "ties"),
                made_playoffs=made_playoffs,
            )
            included = _parse_flag(row.raw_included)
            locked = bool(_parse_flag(row.raw_locked))
            settings[team_id] = {
                "included": (not made_playoffs) if included is None else included,
                "balls": _parse_count(row.raw_balls, "balls") if row.raw_balls else None,
                "locked": locked,
                "manual_pick": parse_manual_slot(row.raw_manual_pick),
                "target_percent": _parse_percent(row.raw_target_percent),
            }
        except ValueError as exc:
            logger.debug("Skipping team row %s: %s", index, exc)
            skipped.append(f"row {index}: {exc}")
            continue
        teams.append(team)

    included_ids = [tid for tid, values in settings.items() if values["included"]]
    defaults = allocate_balls(
        [team for team in teams if team.team_id in set(included_ids)],
        rules,
        include=included_ids,
    )

    configs: Dict[str, TeamLotteryConfig] = {}
    defaulted: List[str] = []
    for team in teams:
        values = settings[team.team_id]
        if values["balls"] is None:
            values["balls"] = defaults.get(team.team_id, 0)
            if values["included"]:
                defaulted.append(team.team_id)
        try:
            configs[team.team_id] = TeamLotteryConfig(team_id=team.team_id, **values)
        except ValueError as exc:
            skipped.append(f"team {team.team_id}: {exc}")
            configs[team.team_id] = TeamLotteryConfig.excluded(team.team_id)

    report = IngestReport(
        total_rows=len(rows),
        teams_loaded=len(teams),
        defaulted_balls=defaulted,
        skipped_rows=skipped,
    )
    if skipped:
        logger.warning("Skipped %s of %s team rows", len(skipped), len(rows))
    return teams, configs, report


def load_league_from_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
    rules: AllocationRules | None = None,
) -> Tuple[List[Team], Dict[str, TeamLotteryConfig], IngestReport]:
    return rows_to_league(load_team_csv(path, mapping=mapping), rules=rules)
