"""Monte Carlo permutation analysis of the full draft order."""

from __future__ import annotations

import logging
import os
import random
import time
from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence

from draftlottery.models import FallProtectionConfig, Team, TeamLotteryConfig

from .context import LotteryContext, build_context, require_participants
from .draw import weighted_choice
from .errors import ConfigurationError, EmptyPoolError, InvalidTrialError
from .odds import fallback_picks
from .results import ProbabilityMatrix


logger = logging.getLogger(__name__)

_TRIALS_ENV = "DRAFTLOTTERY_TRIALS"
_TRIALS_DEFAULT = 10_000


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def default_trials() -> int:
    return _env_int(_TRIALS_ENV, _TRIALS_DEFAULT, min_value=1)


def _eligible_pool(context: LotteryContext, remaining: Mapping[str, int], pick: int) -> Dict[str, int]:
    pool = {tid: balls for tid, balls in remaining.items() if context.is_eligible(tid, pick)}
    if not pool:
        raise EmptyPoolError(pick)
    return pool


def _find_chain(
    context: LotteryContext,
    assignment: Mapping[int, str],
    mover: str,
    slots: Sequence[int],
    open_slots: set[int],
) -> Optional[List[int]]:
    """Slots to shift so ``mover`` can be placed legally.

    Returns ``[s0, s1, ..., sk]``: ``mover`` takes ``s0``, the team on each
    ``s(i)`` moves down to ``s(i+1)`` and ``sk`` is an open slot. Every move
    goes to a strictly later pick the moved team is still eligible for, so
    the chain is at most ``len(slots)`` long.
    """

    dead: set[int] = set()
    max_depth = len(slots)

    def search(team_id: str, after: int, depth: int) -> Optional[List[int]]:
        if depth > max_depth:
            return None
        candidates = [s for s in slots if s > after and context.is_eligible(team_id, s)]
        for slot in candidates:
            if slot in open_slots:
                return [slot]
        for slot in reversed(candidates):
            if slot in dead or slot in open_slots:
                continue
            path = search(assignment[slot], slot, depth + 1)
            if path is not None:
                return [slot, *path]
            dead.add(slot)
        return None

    return search(mover, 0, 0)


def _repair(
    context: LotteryContext,
    assignment: Dict[int, str],
    remaining: Mapping[str, int],
    slots: Sequence[int],
) -> None:
    open_slots = {slot for slot in slots if slot not in assignment}
    # remaining preserves worst-first order.
    for team_id in list(remaining):
        path = _find_chain(context, assignment, team_id, slots, open_slots)
        if path is None:
            raise InvalidTrialError(f"No legal pick for {team_id}")
        displaced = [assignment[slot] for slot in path[:-1]]
        assignment[path[0]] = team_id
        for slot, moved in zip(path[1:], displaced):
            assignment[slot] = moved
        open_slots.discard(path[-1])


def _validate_trial(context: LotteryContext, assignment: Mapping[int, str], slots: Sequence[int]) -> None:
    if len(assignment) != len(slots) or set(assignment.values()) != set(context.weighted):
        raise InvalidTrialError("Trial did not assign every weighted team exactly once")
    for slot, team_id in assignment.items():
        if not context.is_eligible(team_id, slot):
            raise InvalidTrialError(f"{team_id} fell past its protected pick ({slot})")


def _run_trial(context: LotteryContext, slots: Sequence[int], rng: random.Random) -> Dict[int, str]:
    assignment: Dict[int, str] = {}
    remaining: Dict[str, int] = dict(context.weighted)
    for slot in slots:
        try:
            pool = _eligible_pool(context, remaining, slot)
        except EmptyPoolError:
            _repair(context, assignment, remaining, slots)
            break
        team_ids = list(pool)
        team_id = weighted_choice(rng, team_ids, [pool[tid] for tid in team_ids])
        assignment[slot] = team_id
        del remaining[team_id]
    _validate_trial(context, assignment, slots)
    return assignment


def simulate(
    teams: Sequence[Team],
    configs: Mapping[str, TeamLotteryConfig] | Sequence[TeamLotteryConfig],
    fall_protection: Optional[FallProtectionConfig] = None,
    *,
    trials: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> ProbabilityMatrix:
    """Estimate every team's pick distribution from repeated draws."""

    context = build_context(teams, configs, fall_protection)
    require_participants(context)
    trials = default_trials() if trials is None else trials
    if trials < 1:
        raise ConfigurationError(
            f"trials must be at least 1, got {trials}",
            code="invalid_trials",
            details={"trials": trials},
        )
    rng = rng or random.Random()

    fixed: Dict[int, str] = dict(context.locks)
    fixed.update(fallback_picks(context))
    slots = [p for p in range(1, context.total_picks + 1) if p not in fixed]

    counts: Dict[str, Counter] = {team_id: Counter() for team_id in context.weighted}
    valid = 0
    start = time.perf_counter()
    for _ in range(trials):
        try:
            assignment = _run_trial(context, slots, rng)
        except InvalidTrialError as exc:
            logger.debug("Discarding trial: %s", exc)
            continue
        valid += 1
        for slot, team_id in assignment.items():
            counts[team_id][slot] += 1

    elapsed = time.perf_counter() - start
    discarded = trials - valid
    if valid == 0:
        raise ConfigurationError(
            "Fall protection cannot be satisfied: every simulated trial was invalid",
            code="unsatisfiable_constraints",
            details={"trials": trials},
        )
    if discarded:
        logger.warning("Discarded %s/%s invalid trials", discarded, trials)

    picks = range(1, context.total_picks + 1)
    rows: Dict[str, Dict[int, float]] = {}
    for pick, team_id in fixed.items():
        rows[team_id] = {p: (100.0 if p == pick else 0.0) for p in picks}
    for team_id, counter in counts.items():
        rows[team_id] = {p: round(counter[p] / valid * 100.0, 1) for p in picks}

    logger.info(
        "Simulated %s trials (%s valid) for %s teams in %.2fs",
        trials,
        valid,
        context.total_picks,
        elapsed,
    )
    ordered = {team.team_id: rows[team.team_id] for team in context.teams}
    return ProbabilityMatrix(rows=ordered, requested_trials=trials, valid_trials=valid)
