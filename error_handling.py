"""
Structured error handling for the Safari scripting core.

Provides custom exception types, error context and recovery hints.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RecoveryStrategy(Enum):
    """Error recovery strategies."""
    RETRY = "retry"
    SKIP = "skip"
    ABORT = "abort"
    CALLER_DECIDES = "caller_decides"


@dataclass
class ErrorContext:
    """
    Context information about an error.

    Captures what was being looked up and where.
    """

    error_type: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    # Lookup context
    locator: Optional[str] = None
    frame: Optional[str] = None

    # Host context
    page_url: Optional[str] = None
    script_excerpt: Optional[str] = None

    # Additional metadata
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'error_type': self.error_type,
            'message': self.message,
            'timestamp': self.timestamp.isoformat(),
            'locator': self.locator,
            'frame': self.frame,
            'page_url': self.page_url,
            'script_excerpt': self.script_excerpt,
            'metadata': self.metadata
        }


class ScripterError(Exception):
    """
    Base exception for all scripting errors.

    All custom exceptions should inherit from this.
    """

    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    recovery_strategy: RecoveryStrategy = RecoveryStrategy.CALLER_DECIDES

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        **kwargs
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext(
            error_type=self.__class__.__name__,
            message=message
        )

        # Allow overriding context fields
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value


class MissingWayOfFindingObjectException(ScripterError):
    """A locator strategy is not supported for this kind of element."""
    severity = ErrorSeverity.CRITICAL
    recovery_strategy = RecoveryStrategy.ABORT


class UnknownObjectException(ScripterError):
    """Element could not be found in the document."""
    severity = ErrorSeverity.MEDIUM
    recovery_strategy = RecoveryStrategy.CALLER_DECIDES


class UnknownFrameException(ScripterError):
    """Named frame does not exist in the parent window."""
    severity = ErrorSeverity.MEDIUM
    recovery_strategy = RecoveryStrategy.CALLER_DECIDES


class UnknownCellException(ScripterError):
    """Table cell could not be resolved."""
    severity = ErrorSeverity.MEDIUM
    recovery_strategy = RecoveryStrategy.CALLER_DECIDES


class PageLoadTimeoutError(ScripterError):
    """Page did not report completion within the polling bound."""
    severity = ErrorSeverity.HIGH
    recovery_strategy = RecoveryStrategy.ABORT


class HostError(ScripterError):
    """The scripting host itself failed (application unreachable, script rejected)."""
    severity = ErrorSeverity.HIGH
    recovery_strategy = RecoveryStrategy.ABORT


class ConfigurationError(ScripterError):
    """Invalid configuration."""
    severity = ErrorSeverity.CRITICAL
    recovery_strategy = RecoveryStrategy.ABORT
