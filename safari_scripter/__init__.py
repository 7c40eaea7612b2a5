"""
Public package surface for the Safari scripting core.

This module re-exports the primary classes and helpers so consumers can simply:

    from safari_scripter import PageScripter, Locator, Strategy
"""

# Session
from scripter import PageScripter

# Configuration
from scripter_config import ScripterConfig, TimingConfig, LoggingConfig

# Scripting hosts
from host_provider import (
    HostConfig,
    ScriptingHost,
    AppleScriptHost,
    PlaywrightHost,
    MockScriptingHost,
    create_scripting_host,
)
from system_events import SystemEvents

# Locators and results
from models import (
    Strategy,
    Locator,
    RowPosition,
    CellPosition,
    LoadOutcome,
    LoadStatus,
)

# Core
from locator_compiler import compile_locator, compile_cell
from script_composer import ScriptScope, compose
from execution_protocol import ExecutionProtocol
from page_load import PageLoadSynchronizer

# Errors
from error_handling import (
    ScripterError,
    MissingWayOfFindingObjectException,
    UnknownObjectException,
    UnknownFrameException,
    UnknownCellException,
    PageLoadTimeoutError,
    HostError,
    ConfigurationError,
    ErrorContext,
    ErrorSeverity,
    RecoveryStrategy,
)

# Event logging
from utils.event_logger import EventLogger, set_event_logger

__version__ = "0.1.0"

__all__ = [
    # Session
    "PageScripter",
    # Configuration
    "ScripterConfig",
    "TimingConfig",
    "LoggingConfig",
    # Scripting hosts
    "HostConfig",
    "ScriptingHost",
    "AppleScriptHost",
    "PlaywrightHost",
    "MockScriptingHost",
    "create_scripting_host",
    "SystemEvents",
    # Locators and results
    "Strategy",
    "Locator",
    "RowPosition",
    "CellPosition",
    "LoadOutcome",
    "LoadStatus",
    # Core
    "compile_locator",
    "compile_cell",
    "ScriptScope",
    "compose",
    "ExecutionProtocol",
    "PageLoadSynchronizer",
    # Errors
    "ScripterError",
    "MissingWayOfFindingObjectException",
    "UnknownObjectException",
    "UnknownFrameException",
    "UnknownCellException",
    "PageLoadTimeoutError",
    "HostError",
    "ConfigurationError",
    "ErrorContext",
    "ErrorSeverity",
    "RecoveryStrategy",
    # Event logging
    "EventLogger",
    "set_event_logger",
]
