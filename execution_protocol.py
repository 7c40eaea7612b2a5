"""
Execution protocol: one composed script per call, reply decoded at one boundary.

Generated scripts signal lookup failures by returning reserved sentinel
strings, since the host does not carry in-page exceptions across as typed
errors. ``decode_reply`` is the only place those strings are interpreted;
callers above this module see values or typed exceptions.

Known limitation: page content that is literally equal to a sentinel string
is indistinguishable from the sentinel.
"""
from __future__ import annotations

from typing import Any, Optional, Union

from error_handling import ScripterError, UnknownCellException, UnknownFrameException, UnknownObjectException
from models import CellPosition, ExecutionReply, Locator, SentinelKind
from utils.event_logger import EventLogger, get_event_logger


Target = Union[Locator, CellPosition, str, None]


def decode_reply(raw: Any) -> ExecutionReply:
    """Classify a raw host reply as a sentinel or a plain value."""
    sentinel = SentinelKind.lookup(raw)
    if sentinel is not None:
        return ExecutionReply.of_sentinel(sentinel)
    return ExecutionReply.of_value(raw)


def is_extra_action_success(raw: Any) -> bool:
    return decode_reply(raw).is_(SentinelKind.EXTRA_ACTION_SUCCESS)


def _describe(target: Target) -> str:
    if target is None:
        return "element"
    if isinstance(target, (Locator, CellPosition)):
        return target.describe()
    return str(target)


class ExecutionProtocol:
    """
    Sends scripts to a scripting host and interprets the replies.

    Every call is a synchronous, independent round trip; nothing is batched.
    """

    def __init__(self, host, event_logger: Optional[EventLogger] = None):
        self.host = host
        self.events = event_logger or get_event_logger()

    def execute(self, script: str, target: Target = None) -> Any:
        """
        Run ``script`` and return its value.

        Raises:
            UnknownObjectException: reply is the element-not-found sentinel
            UnknownCellException: reply is the cell-not-found sentinel
            UnknownFrameException: reply is the frame-not-found sentinel
            HostError: the host itself failed (propagated unchanged)
        """
        self.events.script_execute(script)
        raw = self.host.run_script(script)
        reply = decode_reply(raw)
        if not reply.is_sentinel:
            self.events.script_reply(raw)
            return reply.value
        return self._handle_sentinel(reply.sentinel, target, script)

    def execute_ignoring(self, script: str) -> None:
        """Run ``script`` and discard the reply, whatever it is. Never raises."""
        self.events.script_execute(script, ignored=True)
        try:
            self.host.run_script(script)
        except ScripterError as e:
            self.events.system_warning("Ignored script failed on the host", error=str(e))
            return None
        self.events.script_ignored()
        return None

    def _handle_sentinel(self, sentinel: SentinelKind, target: Target, script: str) -> Any:
        if sentinel is SentinelKind.NO_RESPONSE:
            self.events.script_reply(None, sentinel=sentinel.name)
            return None
        if sentinel is SentinelKind.EXTRA_ACTION_SUCCESS:
            self.events.script_reply(sentinel.value, sentinel=sentinel.name)
            return sentinel.value

        description = _describe(target)
        self.events.script_sentinel(sentinel.name, description)
        excerpt = script[-200:]
        page_url = self._current_url()
        if sentinel is SentinelKind.ELEMENT_NOT_FOUND:
            raise UnknownObjectException(
                f"Unable to locate {description}",
                locator=description, page_url=page_url, script_excerpt=excerpt,
            )
        if sentinel is SentinelKind.CELL_NOT_FOUND:
            raise UnknownCellException(
                f"Unable to locate a {description}",
                locator=description, page_url=page_url, script_excerpt=excerpt,
            )
        raise UnknownFrameException(
            f"Unable to locate a frame with name {description}",
            frame=description, page_url=page_url, script_excerpt=excerpt,
        )

    def _current_url(self) -> Optional[str]:
        try:
            return self.host.current_url()
        except Exception as e:
            self.events.system_debug("Could not read URL for error context", error=str(e))
            return None


__all__ = ["ExecutionProtocol", "decode_reply", "is_extra_action_success"]
