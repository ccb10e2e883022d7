"""Persist and load CLI lottery profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from draftlottery.models import FallProtectionConfig, TeamLotteryConfig


@dataclass
class LotteryProfile:
    configs: Dict[str, TeamLotteryConfig] = field(default_factory=dict)
    fall_protection: FallProtectionConfig = field(default_factory=FallProtectionConfig)
    league_name: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "LotteryProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        configs = {
            team_id: TeamLotteryConfig.model_validate({**payload, "team_id": team_id})
            for team_id, payload in data.get("configs", {}).items()
        }
        return cls(
            configs=configs,
            fall_protection=FallProtectionConfig.model_validate(data.get("fall_protection", {})),
            league_name=data.get("league_name"),
        )

    def save(self, path: Path) -> None:
        payload = {
            "league_name": self.league_name,
            "fall_protection": self.fall_protection.model_dump(),
            "configs": {
                team_id: config.model_dump(exclude={"team_id"})
                for team_id, config in self.configs.items()
            },
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
