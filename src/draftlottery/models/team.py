"""Canonical team and lottery configuration records shared across layers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class LotteryStatus(str, Enum):
    LOCKED = "locked"
    WEIGHTED = "weighted"
    EXCLUDED = "excluded"


class Team(BaseModel):
    """League team identity and record, immutable for a session."""

    team_id: str = Field(..., min_length=1)
    name: str = ""
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    ties: int = Field(default=0, ge=0)
    made_playoffs: bool = False
    owner_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def display_name(self) -> str:
        return self.name or self.team_id

    @property
    def record_label(self) -> str:
        label = f"{self.wins}-{self.losses}"
        if self.ties:
            label += f"-{self.ties}"
        return label


class TeamLotteryConfig(BaseModel):
    """Per-team lottery settings.

    ``balls`` is kept as entered even when the team is locked or excluded so
    that toggling those flags back restores the previous weight. Use
    ``effective_balls`` for accounting.
    """

    team_id: str = Field(..., min_length=1)
    included: bool = True
    balls: int = Field(default=0, ge=0)
    locked: bool = False
    manual_pick: Optional[int] = Field(default=None, ge=1)
    target_percent: Optional[float] = Field(default=None, ge=0.0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _locked_requires_pick(self) -> "TeamLotteryConfig":
        if self.locked and self.manual_pick is None:
            raise ValueError(f"Locked team {self.team_id!r} requires a manual_pick")
        return self

    @property
    def status(self) -> LotteryStatus:
        if self.locked:
            return LotteryStatus.LOCKED
        if self.included and self.balls > 0:
            return LotteryStatus.WEIGHTED
        return LotteryStatus.EXCLUDED

    @property
    def effective_balls(self) -> int:
        return self.balls if self.included else 0

    @classmethod
    def excluded(cls, team_id: str) -> "TeamLotteryConfig":
        return cls(team_id=team_id, included=False)


class FallProtectionConfig(BaseModel):
    """Caps how many spots below its record rank a team may land."""

    enabled: bool = False
    max_spots: int = Field(default=3, ge=1, le=10)

    model_config = ConfigDict(frozen=True)
