"""Closed-form pre-draw odds.

The estimator walks the picks ahead of the target in order and multiplies
the chance that the team misses each one by the chance it wins the target.
Rather than branching on who else wins an earlier pick, it assumes the
pool loses the *average* ball count of the other eligible teams at that
step. This keeps the cost linear in the pick number but means the numbers
are an approximation of the true order statistics; the Monte Carlo
simulator is the reference when exact figures matter.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence

from draftlottery.models import FallProtectionConfig, Team, TeamLotteryConfig

from .context import LotteryContext, build_context
from .results import ProbabilityMatrix


def _deadline(
    team_id: str,
    fall_protection: Optional[FallProtectionConfig],
    ranks: Optional[Mapping[str, int]],
) -> Optional[int]:
    if fall_protection is None or not fall_protection.enabled or ranks is None:
        return None
    rank = ranks.get(team_id)
    if rank is None:
        return None
    return rank + fall_protection.max_spots


def pre_draw_probability(
    team_id: str,
    pick: int,
    pool: Mapping[str, int],
    locks: Mapping[int, str],
    fall_protection: Optional[FallProtectionConfig] = None,
    ranks: Optional[Mapping[str, int]] = None,
) -> float:
    """Percent chance (0-100) that ``team_id`` lands ``pick`` before any draw.

    ``pool`` maps weighted team ids to balls, ``locks`` maps pick numbers to
    the team fixed there. ``ranks`` (1 = worst record) is only consulted when
    fall protection is enabled.
    """

    locked_pick = next((p for p, tid in locks.items() if tid == team_id), None)
    if locked_pick is not None:
        return 100.0 if locked_pick == pick else 0.0
    if pick in locks:
        return 0.0

    team_balls = pool.get(team_id, 0)
    if team_balls <= 0:
        return 0.0

    deadlines = {tid: _deadline(tid, fall_protection, ranks) for tid in pool}

    def eligible(tid: str, step: int) -> bool:
        limit = deadlines.get(tid)
        return limit is None or step <= limit

    if not eligible(team_id, pick):
        return 0.0

    locked_ids = set(locks.values())
    others = {tid: balls for tid, balls in pool.items() if tid != team_id and tid not in locked_ids}
    # Fixed divisor: each earlier pick removes 1/others_count of whatever
    # other balls are left, however many picks have already gone.
    others_count = len(others)
    # Expected fraction of the other teams' balls still in the pool.
    survival = 1.0

    probability = 1.0
    for step in range(1, pick):
        if step in locks:
            continue
        if others_count == 0:
            return 0.0
        eligible_other_balls = sum(b for tid, b in others.items() if eligible(tid, step))
        if eligible(team_id, step):
            pool_balls = team_balls + survival * eligible_other_balls
            probability *= 1.0 - team_balls / pool_balls
            if probability <= 0.0:
                return 0.0
        survival -= survival / others_count

    pool_balls = team_balls + survival * sum(b for tid, b in others.items() if eligible(tid, pick))
    if pool_balls <= 0:
        return 0.0
    probability *= team_balls / pool_balls
    return max(0.0, min(100.0, probability * 100.0))


def context_probability(context: LotteryContext, team_id: str, pick: int) -> float:
    return pre_draw_probability(
        team_id,
        pick,
        context.weighted,
        context.locks,
        context.fall_protection,
        context.ranks,
    )


def estimate_pick_odds(
    teams: Sequence[Team],
    configs: Mapping[str, TeamLotteryConfig] | Sequence[TeamLotteryConfig],
    fall_protection: Optional[FallProtectionConfig],
    team_id: str,
    pick: int,
) -> float:
    """Validate the configuration and return one rounded pre-draw percentage."""

    context = build_context(teams, configs, fall_protection)
    return round(context_probability(context, team_id, pick), 1)


def fallback_picks(context: LotteryContext) -> Dict[int, str]:
    """Deterministic picks for non-participants: right after the weighted picks, worst record first."""

    open_slots = [p for p in range(1, context.total_picks + 1) if p not in context.locks]
    tail = open_slots[len(context.weighted):]
    return dict(zip(tail, context.fallback_order))


def odds_table(
    teams: Sequence[Team],
    configs: Mapping[str, TeamLotteryConfig] | Sequence[TeamLotteryConfig],
    fall_protection: Optional[FallProtectionConfig] = None,
) -> ProbabilityMatrix:
    """Closed-form team x pick table for the whole league."""

    context = build_context(teams, configs, fall_protection)
    picks = range(1, context.total_picks + 1)
    rows: Dict[str, Dict[int, float]] = {}

    for pick, team_id in context.locks.items():
        rows[team_id] = {p: (100.0 if p == pick else 0.0) for p in picks}
    for pick, team_id in fallback_picks(context).items():
        rows[team_id] = {p: (100.0 if p == pick else 0.0) for p in picks}
    for team_id in context.weighted:
        rows[team_id] = {p: round(context_probability(context, team_id, p), 1) for p in picks}

    ordered = {team.team_id: rows[team.team_id] for team in context.teams}
    return ProbabilityMatrix(rows=ordered)
