"""Result containers produced by the draw engine, estimator and simulator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class LotteryPick:
    pick: int
    team_id: str
    odds_percent: float
    was_locked: bool


@dataclass(frozen=True)
class LotteryResult:
    picks: Tuple[LotteryPick, ...]

    @property
    def order(self) -> Tuple[str, ...]:
        return tuple(entry.team_id for entry in self.picks)

    def pick_for(self, team_id: str) -> Optional[LotteryPick]:
        for entry in self.picks:
            if entry.team_id == team_id:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.picks)

    def to_dict(self) -> list[dict[str, Any]]:
        return [
            {
                "pick": entry.pick,
                "team_id": entry.team_id,
                "odds_percent": entry.odds_percent,
                "was_locked": entry.was_locked,
            }
            for entry in self.picks
        ]


@dataclass(frozen=True)
class ProbabilityMatrix:
    """Team x pick probabilities in percent (one decimal)."""

    rows: Mapping[str, Mapping[int, float]]
    requested_trials: int = 0
    valid_trials: int = 0

    @property
    def discarded_trials(self) -> int:
        return self.requested_trials - self.valid_trials

    def probability(self, team_id: str, pick: int) -> float:
        return float(self.rows.get(team_id, {}).get(pick, 0.0))

    def row_sum(self, team_id: str) -> float:
        return round(sum(self.rows.get(team_id, {}).values()), 1)

    def most_likely_pick(self, team_id: str) -> Optional[int]:
        row = self.rows.get(team_id)
        if not row:
            return None
        return max(sorted(row), key=lambda pick: row[pick])

    def to_dict(self) -> dict[str, Any]:
        return {
            "probabilities": {team_id: dict(row) for team_id, row in self.rows.items()},
            "requested_trials": self.requested_trials,
            "valid_trials": self.valid_trials,
            "discarded_trials": self.discarded_trials,
        }
