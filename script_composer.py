"""
Script composition for the scripting host.

A composed script is one self-contained unit: the shared helper library,
followed by an immediately-invoked function holding the scope preamble, the
locator fragment and the operation. The host does not run top-level scripts
as functions, so the wrapper is what makes ``return`` legal.

Nested contexts are an explicit stack of reference rules (``ScriptScope``).
Fragments are generated against the scope's ``document``/``root``
expressions; nothing is rewritten after the fact.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from error_handling import MissingWayOfFindingObjectException
from models import SentinelKind


JS_LIBRARY = """function dispatchOnChange(element) {
  var event = (element.ownerDocument || document).createEvent('HTMLEvents');
  event.initEvent('change', true, true);
  element.dispatchEvent(event);
}"""

TOP_WINDOW = "parent"
TOP_DOCUMENT = "document"


def js_string(value: object) -> str:
    """Render ``value`` as a single-quoted script string literal."""
    text = str(value)
    escaped = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )
    return f"'{escaped}'"


def sentinel_return(kind: SentinelKind) -> str:
    return f"return {js_string(kind.value)};"


@dataclass(frozen=True)
class ScriptFragment:
    """Generated script text that binds the variable named by ``defines``."""
    text: str
    defines: str = "element"

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class ScriptScope:
    """
    Where generated lookups resolve.

    Attributes:
        window: Expression for the window owning the current document
        document: Expression for the owning document (used for createEvent, evaluate)
        root: Expression lookups start from (the document, or a table cell)
        preamble: Statements that must run before ``root`` is usable
        frames: Frame names entered, outermost first
        cell_label: Description of the entered cell, if any
    """
    window: str = TOP_WINDOW
    document: str = TOP_DOCUMENT
    root: str = TOP_DOCUMENT
    preamble: Tuple[str, ...] = field(default_factory=tuple)
    frames: Tuple[str, ...] = field(default_factory=tuple)
    cell_label: Optional[str] = None

    @classmethod
    def top(cls) -> "ScriptScope":
        return cls()

    @property
    def root_is_document(self) -> bool:
        return self.root == self.document

    @property
    def in_cell(self) -> bool:
        return self.cell_label is not None

    @property
    def frame_name(self) -> Optional[str]:
        return self.frames[-1] if self.frames else None

    def enter_frame(self, name: str) -> "ScriptScope":
        """Route document references through ``<window>.<name>``. Must precede any cell."""
        if self.in_cell:
            raise MissingWayOfFindingObjectException(
                f"Cannot enter frame {name!r} from inside {self.cell_label}",
                frame=name,
            )
        window = f"{self.window}.{name}"
        document = f"{window}.document"
        return replace(
            self,
            window=window,
            document=document,
            root=document,
            frames=self.frames + (name,),
        )

    def enter_cell(self, resolution: ScriptFragment, label: str) -> "ScriptScope":
        """Route lookups through a resolved table cell, guarded by the cell sentinel."""
        if self.in_cell:
            raise MissingWayOfFindingObjectException(
                f"Cannot enter {label} from inside {self.cell_label}"
            )
        guard = (
            f"if ({resolution.defines} == undefined) {{\n"
            f"  {sentinel_return(SentinelKind.CELL_NOT_FOUND)}\n"
            f"}}"
        )
        return replace(
            self,
            root=resolution.defines,
            preamble=self.preamble + (resolution.text, guard),
            cell_label=label,
        )


def wrap(body: str) -> str:
    """Prefix the helper library and wrap ``body`` in an immediately-invoked function."""
    return f"""{JS_LIBRARY}
(function() {{
{body}
}})()"""


def compose_plain(body: str, scope: Optional[ScriptScope] = None) -> str:
    """Compose a script that needs the scope but locates no element."""
    scope = scope or ScriptScope.top()
    return wrap("\n".join(scope.preamble + (body,)))


def compose(fragment: ScriptFragment, operation: str, scope: Optional[ScriptScope] = None) -> str:
    """
    Merge a locator fragment and an operation into one host script.

    The operation only runs when the fragment bound an element; otherwise the
    script returns the element-not-found sentinel.
    """
    scope = scope or ScriptScope.top()
    body = f"""{fragment.text}
if ({fragment.defines}) {{
{operation}
}} else {{
  {sentinel_return(SentinelKind.ELEMENT_NOT_FOUND)}
}}"""
    return compose_plain(body, scope)


__all__ = [
    "JS_LIBRARY",
    "ScriptFragment",
    "ScriptScope",
    "js_string",
    "sentinel_return",
    "wrap",
    "compose",
    "compose_plain",
]
