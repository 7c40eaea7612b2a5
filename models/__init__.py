"""
Data models for the Safari scripting core.
"""
from .locator_models import (
    Strategy,
    Locator,
    RowPosition,
    CellPosition,
    is_pattern,
    is_case_insensitive,
)
from .reply_models import (
    SentinelKind,
    ReplyKind,
    ExecutionReply,
    LoadStatus,
    LoadOutcome,
)

__all__ = [
    "Strategy",
    "Locator",
    "RowPosition",
    "CellPosition",
    "is_pattern",
    "is_case_insensitive",
    "SentinelKind",
    "ReplyKind",
    "ExecutionReply",
    "LoadStatus",
    "LoadOutcome",
]
