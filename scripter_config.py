"""
Configuration models for the Safari scripting core.

Settings are grouped the same way the session uses them: which scripting
host to talk to, how long to wait for pages, and how chatty to be.

Example:
    >>> from scripter_config import ScripterConfig, TimingConfig
    >>> config = ScripterConfig(timing=TimingConfig(max_rounds=20))
    >>> scripter = PageScripter.from_config(config)
"""
from __future__ import annotations

from pydantic import BaseModel, Field
from host_provider import HostConfig


class TimingConfig(BaseModel):
    """Page-load polling and typing delays, in seconds."""

    initial_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay after the navigation action before the first poll"
    )
    poll_interval: float = Field(
        default=1.0,
        ge=0.0,
        description="Sleep between unready polling rounds"
    )
    settle_delay: float = Field(
        default=0.4,
        ge=0.0,
        description="Delay after ready-state completes, before the meta-refresh scan"
    )
    max_rounds: int = Field(
        default=10,
        ge=1,
        description="Maximum polling rounds before the load is declared timed out"
    )
    typing_lag: float = Field(
        default=0.0,
        ge=0.0,
        description="Sleep before each simulated keystroke"
    )

    class Config:
        arbitrary_types_allowed = True

    @property
    def timeout_seconds(self) -> float:
        return self.initial_delay + self.max_rounds * self.poll_interval


class LoggingConfig(BaseModel):
    """Event logging configuration."""

    debug_mode: bool = Field(
        default=False,
        description="Print every event to the console"
    )
    max_history: int = Field(
        default=1000,
        ge=0,
        description="Number of events kept in memory"
    )

    class Config:
        arbitrary_types_allowed = True


class ScripterConfig(BaseModel):
    """
    Main configuration for a scripting session.

    Example:
        >>> config = ScripterConfig(host=HostConfig(host_type="playwright", headless=True))
    """

    host: HostConfig = Field(
        default_factory=HostConfig,
        description="Scripting host configuration"
    )
    timing: TimingConfig = Field(
        default_factory=TimingConfig,
        description="Page-load polling and typing delays"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Event logging configuration"
    )

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def fast(cls) -> ScripterConfig:
        """
        Create a configuration with short polling delays.

        Useful against local pages that load quickly.
        """
        return cls(
            timing=TimingConfig(
                initial_delay=0.2,
                poll_interval=0.2,
                settle_delay=0.1,
                max_rounds=25,
            )
        )

    @classmethod
    def debug(cls) -> ScripterConfig:
        """Create a configuration that prints every event."""
        return cls(logging=LoggingConfig(debug_mode=True))
