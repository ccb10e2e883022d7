"""Draft lottery engine: allocation, draws, odds and simulation."""

from .allocator import allocate_balls, ball_share_percent, balls_from_percentages
from .context import LotteryContext, build_context, build_locked_pick_map, require_participants
from .draw import draw, weighted_choice
from .errors import ConfigurationError, EmptyPoolError, InvalidTrialError
from .odds import estimate_pick_odds, fallback_picks, odds_table, pre_draw_probability
from .results import LotteryPick, LotteryResult, ProbabilityMatrix
from .simulation import simulate
from .standings import record_ranks, sort_best_first, sort_worst_first, win_pct

__all__ = [
    "ConfigurationError",
    "EmptyPoolError",
    "InvalidTrialError",
    "LotteryContext",
    "LotteryPick",
    "LotteryResult",
    "ProbabilityMatrix",
    "allocate_balls",
    "ball_share_percent",
    "balls_from_percentages",
    "build_context",
    "build_locked_pick_map",
    "draw",
    "estimate_pick_odds",
    "fallback_picks",
    "odds_table",
    "pre_draw_probability",
    "record_ranks",
    "require_participants",
    "simulate",
    "sort_best_first",
    "sort_worst_first",
    "weighted_choice",
    "win_pct",
]
