"""Transient per-call results: decoded host replies and page-load outcomes."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SentinelKind(str, Enum):
    """Reserved strings a generated script returns instead of throwing."""
    ELEMENT_NOT_FOUND = "__safari_scripter_element_unfound__"
    FRAME_NOT_FOUND = "__safari_scripter_frame_unfound__"
    CELL_NOT_FOUND = "__safari_scripter_cell_unfound__"
    NO_RESPONSE = "__safari_scripter_no_response__"
    EXTRA_ACTION_SUCCESS = "__safari_scripter_extra_action__"

    @classmethod
    def lookup(cls, raw: Any) -> Optional["SentinelKind"]:
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip())
        except ValueError:
            return None


class ReplyKind(str, Enum):
    VALUE = "value"
    SENTINEL = "sentinel"


@dataclass(frozen=True)
class ExecutionReply:
    """One decoded host reply: either a plain value or a sentinel."""
    kind: ReplyKind
    value: Any = None
    sentinel: Optional[SentinelKind] = None

    @classmethod
    def of_value(cls, value: Any) -> "ExecutionReply":
        return cls(kind=ReplyKind.VALUE, value=value)

    @classmethod
    def of_sentinel(cls, sentinel: SentinelKind) -> "ExecutionReply":
        return cls(kind=ReplyKind.SENTINEL, sentinel=sentinel)

    @property
    def is_sentinel(self) -> bool:
        return self.kind is ReplyKind.SENTINEL

    def is_(self, sentinel: SentinelKind) -> bool:
        return self.sentinel is sentinel


class LoadStatus(str, Enum):
    COMPLETE = "complete"
    REDIRECT_PENDING = "redirect_pending"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class LoadOutcome:
    """
    Result of one page-load wait.

    Attributes:
        status: Final status of the wait
        rounds: Polling rounds consumed
        redirect_delay: Seconds slept for a meta-refresh redirect (0 when none)
        via_extra_action: True when the extra-action probe ended the wait
    """
    status: LoadStatus
    rounds: int = 0
    redirect_delay: float = 0.0
    via_extra_action: bool = False

    @property
    def is_complete(self) -> bool:
        return self.status is LoadStatus.COMPLETE


__all__ = [
    "SentinelKind",
    "ReplyKind",
    "ExecutionReply",
    "LoadStatus",
    "LoadOutcome",
]
