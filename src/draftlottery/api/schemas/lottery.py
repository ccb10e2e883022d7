from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from draftlottery.models import FallProtectionConfig, Team, TeamLotteryConfig


class LotteryRequest(BaseModel):
    teams: List[Team] = Field(..., min_length=1)
    configs: List[TeamLotteryConfig] = Field(default_factory=list)
    fall_protection: FallProtectionConfig = Field(default_factory=FallProtectionConfig)


class DrawRequest(LotteryRequest):
    seed: int | None = None


class SimulateRequest(LotteryRequest):
    trials: int | None = Field(default=None, ge=1, le=200_000)
    seed: int | None = None


class PickOddsRequest(LotteryRequest):
    team_id: str
    pick: int = Field(..., ge=1)


class AllocateRequest(BaseModel):
    teams: List[Team] = Field(..., min_length=1)
    preset: str = "standard"
    include: List[str] | None = None


class LotteryPickResponse(BaseModel):
    pick: int
    label: str
    team_id: str
    team_name: str
    odds_percent: float
    was_locked: bool
    record: str


class DrawResponse(BaseModel):
    picks: List[LotteryPickResponse]
    draw_count: int


class MatrixResponse(BaseModel):
    probabilities: Dict[str, Dict[int, float]]
    requested_trials: int = 0
    valid_trials: int = 0
    discarded_trials: int = 0


class PickOddsResponse(BaseModel):
    team_id: str
    pick: int
    odds_percent: float


class AllocationResponse(BaseModel):
    preset: str
    balls: Dict[str, int]
    percentages: Dict[str, float]
