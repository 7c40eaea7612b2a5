"""
Simple, robust event-driven logging for the Safari scripting core.

Design principles:
- Non-blocking: logging errors never break a scripting call
- Simple: minimal API surface
- Flexible: easy to customize output via callbacks
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
import time


class EventType(str, Enum):
    """All event types that can be logged"""
    # Script execution events
    SCRIPT_EXECUTE = "script_execute"
    SCRIPT_REPLY = "script_reply"
    SCRIPT_SENTINEL = "script_sentinel"
    SCRIPT_IGNORED = "script_ignored"

    # Page-load events
    PAGE_LOAD_START = "page_load_start"
    PAGE_LOAD_POLL = "page_load_poll"
    PAGE_LOAD_REDIRECT = "page_load_redirect"
    PAGE_LOAD_COMPLETE = "page_load_complete"
    PAGE_LOAD_TIMEOUT = "page_load_timeout"

    # Context events
    FRAME_ENTERED = "frame_entered"
    CELL_ENTERED = "cell_entered"

    # Host side channel
    SYSTEM_EVENTS_COMMAND = "system_events_command"

    # System events
    SYSTEM_INFO = "system_info"
    SYSTEM_WARNING = "system_warning"
    SYSTEM_DEBUG = "system_debug"


@dataclass
class ScripterEvent:
    """Structured event data"""
    event_type: EventType
    message: str
    timestamp: float = field(default_factory=time.time)
    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, SUCCESS
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "event_type": self.event_type.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "timestamp_iso": datetime.fromtimestamp(self.timestamp).isoformat(),
            "level": self.level,
            "details": self.details
        }


class EventLogger:
    """
    Simple, robust event logger.

    In debug mode: prints directly to console
    In normal mode: only calls callbacks (no prints)
    """

    def __init__(self, debug_mode: bool = False, max_history: int = 1000):
        self.debug_mode = debug_mode
        self._callbacks: List[Callable[[ScripterEvent], None]] = []
        self._event_history: List[ScripterEvent] = []
        self._max_history = max_history

    def register_callback(self, callback: Callable[[ScripterEvent], None]) -> None:
        """Register a callback for all events"""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ScripterEvent], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def history(self) -> List[ScripterEvent]:
        return list(self._event_history)

    def clear_history(self) -> None:
        self._event_history.clear()

    def _safe_emit(self, event: ScripterEvent) -> None:
        """Safely emit an event - never raises exceptions"""
        try:
            self._event_history.append(event)
            if len(self._event_history) > self._max_history:
                self._event_history.pop(0)
        except Exception:
            pass  # Ignore history errors

        if self.debug_mode:
            try:
                self._print_event(event)
            except Exception:
                pass  # Ignore print errors

        for callback in self._callbacks:
            try:
                callback(event)
            except Exception:
                pass  # Ignore callback errors

    def _print_event(self, event: ScripterEvent) -> None:
        """Print event in debug mode"""
        level_emoji = {
            "DEBUG": "🔍",
            "INFO": "ℹ️",
            "WARNING": "⚠️",
            "ERROR": "❌",
            "SUCCESS": "✅"
        }
        emoji = level_emoji.get(event.level, "•")
        print(f"{emoji} {event.message}")

        if event.details:
            for key, value in event.details.items():
                if value is not None and key not in ['timestamp', 'timestamp_iso']:
                    # Only print simple types to avoid errors
                    if isinstance(value, (str, int, float, bool)):
                        print(f"   {key}: {value}")

    def emit(self, event_type: EventType, message: str, level: str = "INFO", **details) -> None:
        """Emit an event - safe wrapper that never raises"""
        try:
            event = ScripterEvent(
                event_type=event_type,
                message=message,
                level=level,
                details=details
            )
            self._safe_emit(event)
        except Exception:
            if self.debug_mode:
                try:
                    print(f"⚠️ Event logger error: {message}")
                except Exception:
                    pass

    # Convenience methods
    def script_execute(self, script: str, **details):
        first_line = next((line.strip() for line in script.splitlines() if line.strip()), "")
        self.emit(EventType.SCRIPT_EXECUTE, f"Executing script: {first_line[:80]}", "DEBUG",
                  script_length=len(script), **details)

    def script_reply(self, reply: Any, **details):
        preview = reply if isinstance(reply, (int, float, bool)) or reply is None else str(reply)[:80]
        self.emit(EventType.SCRIPT_REPLY, f"Script returned: {preview!r}", "DEBUG", **details)

    def script_sentinel(self, kind: str, target: str = None, **details):
        msg = f"Script signalled {kind}"
        if target:
            msg += f" for {target}"
        self.emit(EventType.SCRIPT_SENTINEL, msg, "WARNING", kind=kind, target=target, **details)

    def script_ignored(self, **details):
        self.emit(EventType.SCRIPT_IGNORED, "Executed script, reply ignored", "DEBUG", **details)

    def page_load_start(self, max_rounds: int, **details):
        self.emit(EventType.PAGE_LOAD_START, f"Waiting for page load (up to {max_rounds} rounds)", "INFO",
                  max_rounds=max_rounds, **details)

    def page_load_poll(self, round_number: int, ready_state: Any = None, url: str = None, **details):
        msg = f"Poll {round_number}: readyState={ready_state!r}"
        if url:
            msg += f" url={url}"
        self.emit(EventType.PAGE_LOAD_POLL, msg, "DEBUG",
                  round_number=round_number, ready_state=str(ready_state), url=url, **details)

    def page_load_redirect(self, delay: float, content: str = None, **details):
        self.emit(EventType.PAGE_LOAD_REDIRECT, f"Meta refresh detected, waiting {delay:g}s", "INFO",
                  delay=delay, content=content, **details)

    def page_load_complete(self, rounds: int, url: str = None, **details):
        msg = f"Page loaded after {rounds} round(s)"
        if url:
            msg += f" - {url}"
        self.emit(EventType.PAGE_LOAD_COMPLETE, msg, "SUCCESS", rounds=rounds, url=url, **details)

    def page_load_timeout(self, max_rounds: int, **details):
        self.emit(EventType.PAGE_LOAD_TIMEOUT, f"Page did not load within {max_rounds} rounds", "ERROR",
                  max_rounds=max_rounds, **details)

    def frame_entered(self, name: str, **details):
        self.emit(EventType.FRAME_ENTERED, f"Entered frame: {name}", "DEBUG", frame=name, **details)

    def cell_entered(self, cell: str, **details):
        self.emit(EventType.CELL_ENTERED, f"Entered {cell}", "DEBUG", cell=cell, **details)

    def system_events_command(self, command: str, **details):
        self.emit(EventType.SYSTEM_EVENTS_COMMAND, f"System Events: {command}", "INFO", command=command, **details)

    def system_info(self, message: str, **details):
        self.emit(EventType.SYSTEM_INFO, message, "INFO", **details)

    def system_warning(self, message: str, **details):
        self.emit(EventType.SYSTEM_WARNING, message, "WARNING", **details)

    def system_debug(self, message: str, **details):
        self.emit(EventType.SYSTEM_DEBUG, message, "DEBUG", **details)


# Global instance
_global_event_logger: Optional[EventLogger] = None

def get_event_logger() -> EventLogger:
    """Get the global event logger instance"""
    global _global_event_logger
    if _global_event_logger is None:
        _global_event_logger = EventLogger()
    return _global_event_logger

def set_event_logger(logger: EventLogger) -> None:
    """Set the global event logger instance"""
    global _global_event_logger
    _global_event_logger = logger
