import pytest
from pydantic import ValidationError

from draftlottery.models import FallProtectionConfig, LotteryStatus, Team, TeamLotteryConfig


def test_team_is_frozen():
    team = Team(team_id="1", name="Alpha", wins=7, losses=6, ties=1)

    assert team.record_label == "7-6-1"
    assert team.display_name == "Alpha"

    with pytest.raises((TypeError, ValidationError)):
        team.wins = 8  # type: ignore[misc]


def test_team_display_name_falls_back_to_id():
    assert Team(team_id="42").display_name == "42"
    assert Team(team_id="42", wins=3, losses=2).record_label == "3-2"


def test_locked_config_requires_manual_pick():
    with pytest.raises(ValidationError):
        TeamLotteryConfig(team_id="1", locked=True)


def test_config_status_precedence():
    locked = TeamLotteryConfig(team_id="1", balls=50, locked=True, manual_pick=3)
    weighted = TeamLotteryConfig(team_id="2", balls=50)
    zero = TeamLotteryConfig(team_id="3", balls=0)
    off = TeamLotteryConfig(team_id="4", balls=50, included=False)

    assert locked.status is LotteryStatus.LOCKED
    assert weighted.status is LotteryStatus.WEIGHTED
    assert zero.status is LotteryStatus.EXCLUDED
    assert off.status is LotteryStatus.EXCLUDED


def test_excluded_team_keeps_balls_but_counts_zero():
    config = TeamLotteryConfig(team_id="1", balls=120, included=False)

    assert config.balls == 120
    assert config.effective_balls == 0
    assert config.model_copy(update={"included": True}).effective_balls == 120


def test_negative_balls_rejected():
    with pytest.raises(ValidationError):
        TeamLotteryConfig(team_id="1", balls=-1)


def test_fall_protection_bounds():
    assert FallProtectionConfig().max_spots == 3
    assert FallProtectionConfig().enabled is False
    with pytest.raises(ValidationError):
        FallProtectionConfig(enabled=True, max_spots=11)
    with pytest.raises(ValidationError):
        FallProtectionConfig(enabled=True, max_spots=0)
