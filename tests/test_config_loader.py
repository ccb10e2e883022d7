import json
from pathlib import Path

from draftlottery.config_loader import LotteryProfile
from draftlottery.models import FallProtectionConfig, TeamLotteryConfig


def test_profile_round_trip(tmp_path: Path):
    path = tmp_path / "profile.json"
    profile = LotteryProfile(
        configs={
            "1": TeamLotteryConfig(team_id="1", balls=250),
            "2": TeamLotteryConfig(team_id="2", balls=100, locked=True, manual_pick=3),
        },
        fall_protection=FallProtectionConfig(enabled=True, max_spots=2),
        league_name="Dynasty",
    )

    profile.save(path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    loaded = LotteryProfile.load(path)

    assert "team_id" not in raw["configs"]["1"]
    assert loaded.configs == profile.configs
    assert loaded.fall_protection.max_spots == 2
    assert loaded.league_name == "Dynasty"


def test_profile_defaults(tmp_path: Path):
    path = tmp_path / "empty.json"
    path.write_text("{}", encoding="utf-8")

    loaded = LotteryProfile.load(path)

    assert loaded.configs == {}
    assert loaded.fall_protection.enabled is False
