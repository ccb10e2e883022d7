"""Pydantic records describing teams and their lottery settings."""

from .team import FallProtectionConfig, LotteryStatus, Team, TeamLotteryConfig

__all__ = [
    "FallProtectionConfig",
    "LotteryStatus",
    "Team",
    "TeamLotteryConfig",
]
