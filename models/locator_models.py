"""Locator value objects describing how to find one DOM node."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Strategy(str, Enum):
    """How a locator finds its node."""
    ID = "id"
    INDEX = "index"
    NAME = "name"
    VALUE = "value"
    TEXT = "text"
    URL = "url"
    CLASS = "class"
    XPATH = "xpath"
    TITLE = "title"
    ALT = "alt"
    SRC = "src"
    ACTION = "action"


LocatorValue = Union[str, int, re.Pattern]


def is_pattern(value: object) -> bool:
    return isinstance(value, re.Pattern)


def is_case_insensitive(value: object) -> bool:
    """True when ``value`` is a pattern compiled with ``re.IGNORECASE``."""
    return is_pattern(value) and bool(value.flags & re.IGNORECASE)


def _check_index(strategy: Strategy, value: object, owner: str) -> None:
    if strategy is Strategy.INDEX:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"{owner} index must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class Locator:
    """
    Immutable description of one element lookup.

    Attributes:
        strategy: Lookup strategy
        value: Literal string, 1-based index, or compiled regular expression
        tag: Upper-case tag name the element must have (e.g. "INPUT")
        by_value: Extra value guard for same-named checkboxes and radios
        element_name: Human readable kind used in failure messages
    """
    strategy: Strategy
    value: LocatorValue
    tag: Optional[str] = None
    by_value: Optional[str] = None
    element_name: str = "element"

    def __post_init__(self):
        if not isinstance(self.strategy, Strategy):
            object.__setattr__(self, "strategy", Strategy(self.strategy))
        if self.tag is not None:
            object.__setattr__(self, "tag", self.tag.upper())
        _check_index(self.strategy, self.value, self.element_name)
        if self.strategy is Strategy.XPATH and not isinstance(self.value, str):
            raise ValueError(f"xpath locator requires a string expression, got {self.value!r}")

    @property
    def zero_based_index(self) -> int:
        return int(self.value) - 1

    def describe(self) -> str:
        what = self.value.pattern if is_pattern(self.value) else self.value
        return f"{self.element_name} element with {self.strategy.value} of {what}"


@dataclass(frozen=True)
class RowPosition:
    """A table row, by id or by 1-based index into ``table``."""
    strategy: Strategy
    value: Union[str, int]
    table: Optional[Locator] = None

    def __post_init__(self):
        if not isinstance(self.strategy, Strategy):
            object.__setattr__(self, "strategy", Strategy(self.strategy))
        _check_index(self.strategy, self.value, "row")


@dataclass(frozen=True)
class CellPosition:
    """A table cell, by id or by 1-based index into ``row``."""
    strategy: Strategy
    value: Union[str, int]
    row: Optional[RowPosition] = None

    def __post_init__(self):
        if not isinstance(self.strategy, Strategy):
            object.__setattr__(self, "strategy", Strategy(self.strategy))
        _check_index(self.strategy, self.value, "cell")

    def describe(self) -> str:
        return f"table cell with {self.strategy.value} of {self.value}"


__all__ = [
    "Strategy",
    "Locator",
    "RowPosition",
    "CellPosition",
    "LocatorValue",
    "is_pattern",
    "is_case_insensitive",
]
