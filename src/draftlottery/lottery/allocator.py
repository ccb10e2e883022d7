"""Default ball allocation by record rank."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Mapping, Optional, Sequence

from draftlottery.config import AllocationRules, get_rules
from draftlottery.models import LotteryStatus, Team, TeamLotteryConfig

from .context import TARGET_PERCENT_LIMIT
from .errors import ConfigurationError
from .standings import sort_worst_first


logger = logging.getLogger(__name__)


def _apportion(weights: Sequence[float], total: int) -> List[int]:
    """Split ``total`` into integers proportional to ``weights`` (largest remainder)."""

    weight_sum = sum(weights)
    if not weights or weight_sum <= 0 or total <= 0:
        return [0 for _ in weights]
    raw = [w * total / weight_sum for w in weights]
    floors = [math.floor(value) for value in raw]
    shortfall = total - sum(floors)
    by_remainder = sorted(range(len(raw)), key=lambda i: (-(raw[i] - floors[i]), i))
    for idx in by_remainder[:shortfall]:
        floors[idx] += 1
    return floors


def _relative_weights(count: int, rules: AllocationRules) -> List[int]:
    return [max(rules.top_weight - rules.step * rank, rules.floor) for rank in range(count)]


def allocate_balls(
    teams: Sequence[Team],
    rules: Optional[AllocationRules] = None,
    *,
    include: Optional[Iterable[str]] = None,
) -> dict[str, int]:
    """Return default balls for every lottery-eligible team.

    Eligible teams are those that missed the playoffs plus any ids listed in
    ``include``. The result is keyed by team id in worst-to-best order.
    """

    rules = rules or get_rules()
    forced = set(include or [])
    eligible = [
        team for team in sort_worst_first(teams)
        if not team.made_playoffs or team.team_id in forced
    ]
    if not eligible:
        return {}
    if len(eligible) == 1:
        return {eligible[0].team_id: rules.base_pool}

    relative = _relative_weights(len(eligible), rules)
    balls = _apportion(relative, rules.base_pool)

    if rules.worst_share is not None:
        # The worst team's share is exact; everyone else splits the remainder
        # in proportion, even when that leaves a better team ahead of it.
        worst = round(rules.worst_share * rules.base_pool)
        balls = [worst, *_apportion(balls[1:], rules.base_pool - worst)]

    balls = [max(1, value) for value in balls]
    logger.debug("Allocated %s balls across %s teams (%s)", sum(balls), len(balls), rules.name)
    return {team.team_id: value for team, value in zip(eligible, balls)}


def ball_share_percent(configs: Mapping[str, TeamLotteryConfig]) -> dict[str, float]:
    """Each weighted team's share of the ball pool, one decimal."""

    weighted = {
        team_id: config.balls
        for team_id, config in configs.items()
        if config.status is LotteryStatus.WEIGHTED
    }
    total = sum(weighted.values())
    if total <= 0:
        return {}
    return {team_id: round(balls / total * 100.0, 1) for team_id, balls in weighted.items()}


def balls_from_percentages(targets: Mapping[str, float], pool: int = 1000) -> dict[str, int]:
    """Convert typed percentages into integer balls out of ``pool``."""

    total = sum(targets.values())
    if total > TARGET_PERCENT_LIMIT:
        raise ConfigurationError(
            f"Target percentages add up to {total:.1f}%, above 100%",
            code="target_percent_overflow",
            details={"total_percent": round(total, 3)},
        )
    team_ids = list(targets)
    scaled_pool = round(pool * min(total, 100.0) / 100.0)
    values = _apportion([max(0.0, targets[tid]) for tid in team_ids], scaled_pool)
    return dict(zip(team_ids, values))
