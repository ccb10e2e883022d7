"""Single weighted draft lottery draw."""

from __future__ import annotations

import logging
import random
import time
from typing import Dict, List, Mapping, Optional, Sequence

from draftlottery.models import FallProtectionConfig, Team, TeamLotteryConfig

from .context import LotteryContext, build_context, require_participants
from .errors import EmptyPoolError
from .odds import context_probability
from .results import LotteryPick, LotteryResult


logger = logging.getLogger(__name__)


def weighted_choice(rng: random.Random, items: Sequence[str], weights: Sequence[int]) -> str:
    """Pick one item with probability proportional to its weight."""

    total = sum(weights)
    if not items or total <= 0:
        raise ValueError("weighted_choice requires at least one positive weight")
    x = rng.random() * total
    cumulative = 0
    for item, weight in zip(items, weights):
        cumulative += weight
        if x < cumulative:
            return item
    return items[-1]


def _draw_pool(context: LotteryContext, remaining: Mapping[str, int], pick: int) -> Dict[str, int]:
    """Weighted teams that may take ``pick``.

    Under fall protection a team whose last protected pick has arrived (or
    passed, when locks occupied it) is drawn from a pool of such teams
    before anyone else is considered. A plain ``rank + max_spots >= pick``
    filter can leave a later pick with nobody legal to take it; drawing due
    teams first always completes the order when no locks are set.

    The ``odds_percent`` recorded for such a pick is still the closed-form
    pre-draw estimate for that team and pick. It is not the probability of
    the forced placement itself.
    """

    if not remaining:
        raise EmptyPoolError(pick)
    if context.protection_enabled:
        due = {tid: balls for tid, balls in remaining.items() if context.deadline(tid) <= pick}
        if due:
            return due
    return dict(remaining)


def draw(
    teams: Sequence[Team],
    configs: Mapping[str, TeamLotteryConfig] | Sequence[TeamLotteryConfig],
    fall_protection: Optional[FallProtectionConfig] = None,
    *,
    rng: Optional[random.Random] = None,
) -> LotteryResult:
    """Run one lottery and return the full draft order."""

    context = build_context(teams, configs, fall_protection)
    require_participants(context)
    rng = rng or random.Random()
    start = time.perf_counter()

    results: List[LotteryPick] = [
        LotteryPick(pick=pick, team_id=team_id, odds_percent=100.0, was_locked=True)
        for pick, team_id in context.locks.items()
    ]
    remaining: Dict[str, int] = dict(context.weighted)
    fallback = list(context.fallback_order)

    for pick in range(1, context.total_picks + 1):
        if pick in context.locks:
            continue
        try:
            pool = _draw_pool(context, remaining, pick)
        except EmptyPoolError:
            team_id = fallback.pop(0)
            results.append(LotteryPick(pick=pick, team_id=team_id, odds_percent=0.0, was_locked=False))
            continue

        team_ids = list(pool)
        team_id = weighted_choice(rng, team_ids, [pool[tid] for tid in team_ids])
        odds = round(context_probability(context, team_id, pick), 1)
        results.append(LotteryPick(pick=pick, team_id=team_id, odds_percent=odds, was_locked=False))
        del remaining[team_id]
        logger.debug("Pick %s drawn by %s (pre-draw odds %.1f%%)", pick, team_id, odds)

    results.sort(key=lambda entry: entry.pick)
    logger.info(
        "Lottery draw completed – %s picks (%s locked, %s weighted) in %.3fs",
        len(results),
        len(context.locks),
        len(context.weighted),
        time.perf_counter() - start,
    )
    return LotteryResult(picks=tuple(results))
