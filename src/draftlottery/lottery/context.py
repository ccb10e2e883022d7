"""Validate lottery inputs and partition teams before any draw runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

from draftlottery.models import FallProtectionConfig, LotteryStatus, Team, TeamLotteryConfig

from .errors import ConfigurationError
from .standings import record_ranks, sort_worst_first


MAX_BALLS = 10_000
TARGET_PERCENT_LIMIT = 100.1


@dataclass(frozen=True)
class LotteryContext:
    """Immutable snapshot of one lottery configuration."""

    teams: Tuple[Team, ...]
    configs: Mapping[str, TeamLotteryConfig]
    locks: Mapping[int, str]
    weighted: Mapping[str, int]
    fallback_order: Tuple[str, ...]
    ranks: Mapping[str, int]
    fall_protection: Optional[FallProtectionConfig]

    @property
    def total_picks(self) -> int:
        return len(self.teams)

    @property
    def protection_enabled(self) -> bool:
        return self.fall_protection is not None and self.fall_protection.enabled

    def team(self, team_id: str) -> Team:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        raise KeyError(team_id)

    def deadline(self, team_id: str) -> Optional[int]:
        """Worst pick the team may receive, or None when unprotected."""

        if not self.protection_enabled:
            return None
        return self.ranks[team_id] + self.fall_protection.max_spots

    def is_eligible(self, team_id: str, pick: int) -> bool:
        deadline = self.deadline(team_id)
        return deadline is None or pick <= deadline


def _normalize_configs(
    teams: Sequence[Team],
    configs: Mapping[str, TeamLotteryConfig] | Sequence[TeamLotteryConfig],
) -> Dict[str, TeamLotteryConfig]:
    if isinstance(configs, Mapping):
        items = list(configs.values())
    else:
        items = list(configs)

    team_ids = {team.team_id for team in teams}
    normalized: Dict[str, TeamLotteryConfig] = {}
    for config in items:
        if config.team_id not in team_ids:
            raise ConfigurationError(
                f"Configuration references unknown team {config.team_id!r}",
                code="unknown_team",
                details={"team_id": config.team_id},
            )
        normalized[config.team_id] = config
    for team in teams:
        normalized.setdefault(team.team_id, TeamLotteryConfig.excluded(team.team_id))
    return normalized


def build_locked_pick_map(
    configs: Mapping[str, TeamLotteryConfig],
    total_picks: int,
) -> Dict[int, str]:
    """Map pick number to team id for every locked team."""

    locks: Dict[int, str] = {}
    for team_id, config in configs.items():
        if not config.locked:
            continue
        pick = config.manual_pick
        if pick is None:
            raise ConfigurationError(
                f"Locked team {team_id!r} has no manual pick",
                code="missing_manual_pick",
                details={"team_id": team_id},
            )
        if pick < 1 or pick > total_picks:
            raise ConfigurationError(
                f"Manual pick {pick} for team {team_id!r} is outside 1..{total_picks}",
                code="pick_out_of_range",
                details={"team_id": team_id, "pick": pick, "total_picks": total_picks},
            )
        if pick in locks:
            raise ConfigurationError(
                f"Pick {pick} is locked to both {locks[pick]!r} and {team_id!r}",
                code="duplicate_locked_pick",
                details={"pick": pick, "team_ids": [locks[pick], team_id]},
            )
        locks[pick] = team_id
    return dict(sorted(locks.items()))


def _validate_weights(configs: Mapping[str, TeamLotteryConfig]) -> None:
    for team_id, config in configs.items():
        if config.balls > MAX_BALLS:
            raise ConfigurationError(
                f"Team {team_id!r} has {config.balls} balls; the limit is {MAX_BALLS}",
                code="balls_out_of_range",
                details={"team_id": team_id, "balls": config.balls, "limit": MAX_BALLS},
            )

    targets = [
        config.target_percent
        for config in configs.values()
        if config.target_percent is not None and config.status is LotteryStatus.WEIGHTED
    ]
    total = sum(targets)
    if total > TARGET_PERCENT_LIMIT:
        raise ConfigurationError(
            f"Target percentages add up to {total:.1f}%, above 100%",
            code="target_percent_overflow",
            details={"total_percent": round(total, 3)},
        )


def build_context(
    teams: Sequence[Team],
    configs: Mapping[str, TeamLotteryConfig] | Sequence[TeamLotteryConfig],
    fall_protection: Optional[FallProtectionConfig] = None,
) -> LotteryContext:
    """Validate inputs and return the partitioned lottery context."""

    seen: set[str] = set()
    for team in teams:
        if team.team_id in seen:
            raise ConfigurationError(
                f"Duplicate team id {team.team_id!r}",
                code="duplicate_team",
                details={"team_id": team.team_id},
            )
        seen.add(team.team_id)

    normalized = _normalize_configs(teams, configs)
    _validate_weights(normalized)
    locks = build_locked_pick_map(normalized, len(teams))

    worst_first = sort_worst_first(teams)
    weighted: Dict[str, int] = {}
    fallback: list[str] = []
    for team in worst_first:
        config = normalized[team.team_id]
        status = config.status
        if status is LotteryStatus.WEIGHTED:
            weighted[team.team_id] = config.balls
        elif status is LotteryStatus.EXCLUDED:
            fallback.append(team.team_id)

    ranks = record_ranks(teams, {tid: cfg.effective_balls for tid, cfg in normalized.items()})

    return LotteryContext(
        teams=tuple(teams),
        configs=normalized,
        locks=locks,
        weighted=weighted,
        fallback_order=tuple(fallback),
        ranks=ranks,
        fall_protection=fall_protection,
    )


def require_participants(context: LotteryContext) -> None:
    if not context.weighted and not context.locks:
        raise ConfigurationError(
            "No eligible weighted teams and no locked picks",
            code="no_participants",
        )
