import random
from collections import Counter

import pytest

from draftlottery.lottery import ConfigurationError, draw, estimate_pick_odds, weighted_choice
from draftlottery.models import FallProtectionConfig, Team, TeamLotteryConfig


def _teams(size: int = 4) -> list[Team]:
    # "T1" has the worst record.
    return [Team(team_id=f"T{idx}", name=f"Team {idx}", wins=idx, losses=size - idx) for idx in range(1, size + 1)]


def _weighted(teams: list[Team], balls: int = 10) -> list[TeamLotteryConfig]:
    return [TeamLotteryConfig(team_id=team.team_id, balls=balls) for team in teams]


def test_weighted_choice_never_picks_zero_weight():
    rng = random.Random(7)
    picks = {weighted_choice(rng, ["a", "b", "c"], [0, 5, 0]) for _ in range(200)}

    assert picks == {"b"}


def test_weighted_choice_requires_positive_weight():
    with pytest.raises(ValueError):
        weighted_choice(random.Random(1), ["a"], [0])


def test_draw_is_a_permutation():
    teams = _teams(8)
    result = draw(teams, _weighted(teams), rng=random.Random(11))

    assert [entry.pick for entry in result.picks] == list(range(1, 9))
    assert sorted(result.order) == sorted(team.team_id for team in teams)
    assert len(result) == 8


def test_locked_team_always_takes_its_pick():
    teams = _teams()
    configs = _weighted(teams)
    configs[3] = TeamLotteryConfig(team_id="T4", balls=10, locked=True, manual_pick=1)

    for seed in range(50):
        result = draw(teams, configs, rng=random.Random(seed))
        first = result.picks[0]
        assert first.team_id == "T4"
        assert first.was_locked is True
        assert first.odds_percent == 100.0
        assert not any(entry.was_locked for entry in result.picks[1:])


def test_single_team_draw():
    teams = [Team(team_id="solo", wins=3, losses=4)]
    result = draw(teams, [TeamLotteryConfig(team_id="solo", balls=1)], rng=random.Random(3))

    assert result.order == ("solo",)
    assert result.picks[0].odds_percent == 100.0


def test_no_participants_raises():
    teams = _teams()
    configs = [TeamLotteryConfig(team_id=team.team_id, balls=10, included=False) for team in teams]

    with pytest.raises(ConfigurationError) as excinfo:
        draw(teams, configs)

    assert excinfo.value.code == "no_participants"


def test_excluded_teams_follow_weighted_picks_worst_first():
    teams = _teams(5)
    configs = [
        TeamLotteryConfig(team_id="T1", balls=0),
        TeamLotteryConfig(team_id="T3", balls=25),
        TeamLotteryConfig(team_id="T5", balls=75),
    ]

    result = draw(teams, configs, rng=random.Random(5))

    assert set(result.order[:2]) == {"T3", "T5"}
    assert result.order[2:] == ("T1", "T2", "T4")
    assert all(entry.odds_percent == 0.0 for entry in result.picks[2:])


def test_first_pick_frequency_tracks_ball_share():
    teams = _teams()
    configs = [
        TeamLotteryConfig(team_id="T1", balls=10),
        TeamLotteryConfig(team_id="T2", balls=5),
        TeamLotteryConfig(team_id="T3", balls=3),
        TeamLotteryConfig(team_id="T4", balls=2),
    ]
    rng = random.Random(2024)

    winners = Counter(draw(teams, configs, rng=rng).order[0] for _ in range(4000))

    assert winners["T1"] / 4000 == pytest.approx(0.50, abs=0.03)
    assert winners["T4"] / 4000 == pytest.approx(0.10, abs=0.02)


def test_reported_odds_match_first_pick_share():
    teams = _teams()
    configs = [
        TeamLotteryConfig(team_id="T1", balls=10),
        TeamLotteryConfig(team_id="T2", balls=5),
        TeamLotteryConfig(team_id="T3", balls=3),
        TeamLotteryConfig(team_id="T4", balls=2),
    ]

    result = draw(teams, configs, rng=random.Random(9))
    first = result.picks[0]

    assert first.odds_percent == {"T1": 50.0, "T2": 25.0, "T3": 15.0, "T4": 10.0}[first.team_id]


def test_fall_protection_bound_holds_in_draws():
    teams = _teams(6)
    configs = _weighted(teams)
    # The best team is heavily weighted so early picks would otherwise crowd out the worst teams.
    configs[5] = TeamLotteryConfig(team_id="T6", balls=500)
    protection = FallProtectionConfig(enabled=True, max_spots=1)

    for seed in range(200):
        result = draw(teams, configs, protection, rng=random.Random(seed))
        for entry in result.picks:
            rank = int(entry.team_id[1:])
            assert entry.pick <= rank + 1


class _ScriptedRandom(random.Random):
    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def random(self):
        return self._values.pop(0)


def test_forced_pick_reports_closed_form_odds():
    teams = _teams(3)
    configs = _weighted(teams)
    protection = FallProtectionConfig(enabled=True, max_spots=1)
    # T2 wins pick 1, so T1 is due at pick 2 and takes it without competition.
    result = draw(teams, configs, protection, rng=_ScriptedRandom([0.5, 0.0, 0.0]))

    forced = result.picks[1]
    assert forced.team_id == "T1"
    assert forced.odds_percent == 33.3
    assert forced.odds_percent == estimate_pick_odds(teams, configs, protection, "T1", 2)
