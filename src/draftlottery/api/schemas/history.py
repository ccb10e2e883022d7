from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from draftlottery.models import Team, TeamLotteryConfig


class PickPayload(BaseModel):
    pick: int = Field(..., ge=1)
    team_id: str
    odds_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    was_locked: bool = False


class SnapshotPayload(BaseModel):
    league_id: str | None = None
    league_name: str | None = None
    season: str | None = None
    results: List[PickPayload] = Field(..., min_length=1)
    teams: List[Team] = Field(..., min_length=1)
    configs: List[TeamLotteryConfig] = Field(default_factory=list)


class HistoryCreateRequest(SnapshotPayload):
    username: str = Field(..., min_length=1)
    share_id: str | None = None


class HistoryEntryResponse(BaseModel):
    history_id: str
    username: str
    created_at: datetime
    league_id: str | None
    league_name: str | None
    season: str | None
    results: List[PickPayload]
    teams: List[Team]
    configs: List[TeamLotteryConfig]
    share_id: str | None


class ShareResponse(BaseModel):
    share_id: str
    created_at: datetime
    expires_at: datetime
    league_id: str | None
    league_name: str | None
    season: str | None
    results: List[PickPayload]
    teams: List[Team]
    configs: List[TeamLotteryConfig]
