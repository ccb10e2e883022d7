"""Weighted draft lottery engine."""

from draftlottery.lottery import draw, estimate_pick_odds, odds_table, simulate

__version__ = "0.1.0"

__all__ = ["draw", "estimate_pick_odds", "odds_table", "simulate"]
