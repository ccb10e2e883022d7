"""Default ball allocation presets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional


@dataclass(frozen=True)
class AllocationRules:
    name: str
    description: str
    top_weight: int
    step: int
    floor: int
    base_pool: int
    worst_share: Optional[float]


_ALLOCATION_RULES: Dict[str, AllocationRules] = {
    "standard": AllocationRules(
        name="standard",
        description="NBA-style: worst team holds 26% of the pool, four points less per rank",
        top_weight=26,
        step=4,
        floor=2,
        base_pool=1000,
        worst_share=0.26,
    ),
    "flat": AllocationRules(
        name="flat",
        description="Every eligible team receives the same number of balls",
        top_weight=1,
        step=0,
        floor=1,
        base_pool=1000,
        worst_share=None,
    ),
}


def iter_rules() -> Iterable[AllocationRules]:
    """Return an iterator of all configured allocation presets."""

    return _ALLOCATION_RULES.values()


def get_rules(name: str = "standard") -> AllocationRules:
    """Fetch an allocation preset by name, raising KeyError if missing."""

    key = name.strip().lower()
    if key not in _ALLOCATION_RULES:
        raise KeyError(f"No allocation rules configured for {name!r}")
    return _ALLOCATION_RULES[key]


# Read-only view for callers that list presets (API, CLI help).
ALLOCATION_PRESETS: Mapping[str, AllocationRules] = dict(_ALLOCATION_RULES)
