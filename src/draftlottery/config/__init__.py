"""Configuration helpers for default lottery weights."""

from .allocation import ALLOCATION_PRESETS, AllocationRules, get_rules, iter_rules

__all__ = [
    "ALLOCATION_PRESETS",
    "AllocationRules",
    "get_rules",
    "iter_rules",
]
