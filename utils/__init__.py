"""
Utility modules for the Safari scripting core.
"""
from .event_logger import EventLogger, EventType, ScripterEvent, get_event_logger, set_event_logger

__all__ = ["EventLogger", "EventType", "ScripterEvent", "get_event_logger", "set_event_logger"]
