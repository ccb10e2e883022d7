"""Pydantic models for API I/O."""

from .history import (
    HistoryCreateRequest,
    HistoryEntryResponse,
    PickPayload,
    ShareResponse,
    SnapshotPayload,
)
from .lottery import (
    AllocateRequest,
    AllocationResponse,
    DrawRequest,
    DrawResponse,
    LotteryPickResponse,
    LotteryRequest,
    MatrixResponse,
    PickOddsRequest,
    PickOddsResponse,
    SimulateRequest,
)

__all__ = [
    "AllocateRequest",
    "AllocationResponse",
    "DrawRequest",
    "DrawResponse",
    "HistoryCreateRequest",
    "HistoryEntryResponse",
    "LotteryPickResponse",
    "LotteryRequest",
    "MatrixResponse",
    "PickOddsRequest",
    "PickOddsResponse",
    "PickPayload",
    "ShareResponse",
    "SimulateRequest",
    "SnapshotPayload",
]
