"""
Locator compilation.

Turns a ``Locator`` into a script fragment that binds ``element`` to the
matched node, or leaves it ``undefined``/``null`` when nothing matches.
Dispatch is a strategy table keyed by ``Strategy``; every entry is a pure
function of the locator and the scope it resolves in.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Optional

from error_handling import MissingWayOfFindingObjectException
from models import CellPosition, Locator, RowPosition, Strategy, is_case_insensitive, is_pattern
from script_composer import ScriptFragment, ScriptScope, js_string


LINK_TAG = "A"
META_TAG = "META"

# Strategies that match one attribute of every node carrying the locator's tag.
ATTRIBUTE_STRATEGIES = {
    Strategy.VALUE: "value",
    Strategy.TITLE: "title",
    Strategy.ALT: "alt",
    Strategy.SRC: "src",
    Strategy.ACTION: "action",
}

LINK_ATTRIBUTES = {
    Strategy.TEXT: "text",
    Strategy.URL: "href",
}

REGEXP_FLAGS = (
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
)

# Named groups and backreferences, \A and \Z (not preceded by an escaped backslash)
PYTHON_ONLY_SYNTAX = re.compile(r"\(\?P[<=]|(?<!\\)(?:\\\\)*\\[AZ]")


def regexp_flags(pattern: re.Pattern, locator: Locator) -> str:
    """
    Script RegExp flags for a compiled pattern.

    Python-only syntax (named groups, ``\\A``/``\\Z``, verbose mode) has no
    script equivalent and is rejected.
    """
    if PYTHON_ONLY_SYNTAX.search(pattern.pattern) or pattern.flags & re.VERBOSE:
        raise MissingWayOfFindingObjectException(
            f"Pattern {pattern.pattern!r} uses syntax the page's RegExp does not support",
            locator=locator.describe(),
        )
    flags = "i" if is_case_insensitive(pattern) else ""
    for flag, letter in REGEXP_FLAGS:
        if pattern.flags & flag:
            flags += letter
    return flags


def match_expression(subject: str, locator: Locator) -> str:
    """Script boolean testing ``subject`` against the locator value."""
    what = locator.value
    if is_pattern(what):
        flags = regexp_flags(what, locator)
        return f"{subject}.match(new RegExp({js_string(what.pattern)}, {js_string(flags)}))"
    if isinstance(what, str):
        return f"{subject} == {js_string(what)}"
    raise MissingWayOfFindingObjectException(
        f"Unable to locate {locator.element_name} with {locator.strategy.value} of {what!r}",
        locator=locator.describe(),
    )


def _require_tag(locator: Locator) -> str:
    if not locator.tag:
        raise MissingWayOfFindingObjectException(
            f"{locator.element_name} does not declare a tag, required for {locator.strategy.value} lookups",
            locator=locator.describe(),
        )
    return locator.tag


def _require_literal(locator: Locator) -> str:
    if is_pattern(locator.value) or not isinstance(locator.value, str):
        raise MissingWayOfFindingObjectException(
            f"{locator.element_name} does not support a pattern for {locator.strategy.value}",
            locator=locator.describe(),
        )
    return locator.value


def _first_match(collection: str, condition: str) -> str:
    return f"""var elements = {collection};
var element = undefined;
for (var i = 0; i < elements.length; i++) {{
  if ({condition}) {{
    element = elements[i];
    break;
  }}
}}"""


def _tag_collection(scope: ScriptScope, tag: str) -> str:
    return f"{scope.root}.getElementsByTagName({js_string(tag)})"


def _is_link(locator: Locator) -> bool:
    return locator.tag in (None, LINK_TAG)


def compile_id(locator: Locator, scope: ScriptScope) -> str:
    what = _require_literal(locator)
    if scope.root_is_document:
        return f"var element = {scope.root}.getElementById({js_string(what)});"
    return f"var element = {scope.root}.querySelector({js_string('[id=' + _css_quote(what) + ']')});"


def compile_index(locator: Locator, scope: ScriptScope) -> str:
    tag = _require_tag(locator)
    return f"var element = {_tag_collection(scope, tag)}[{locator.zero_based_index}];"


def compile_name(locator: Locator, scope: ScriptScope) -> str:
    what = _require_literal(locator)
    tag = _require_tag(locator)
    if scope.root_is_document:
        collection = f"{scope.root}.getElementsByName({js_string(what)})"
    else:
        collection = f"{scope.root}.querySelectorAll({js_string('[name=' + _css_quote(what) + ']')})"
    capture = "element = elements[i];\n    break;"
    if locator.by_value is not None:
        # Checkboxes and radios share a name and differ by value
        capture = f"""if (elements[i].value == {js_string(locator.by_value)}) {{
      element = elements[i];
      break;
    }}"""
    return f"""var elements = {collection};
var element = undefined;
for (var i = 0; i < elements.length; i++) {{
  if (elements[i].tagName != {js_string(META_TAG)} && elements[i].tagName == {js_string(tag)}) {{
    {capture}
  }}
}}"""


def compile_class(locator: Locator, scope: ScriptScope) -> str:
    what = _require_literal(locator)
    return f"""var elements = {scope.root}.getElementsByClassName({js_string(what)});
var element = elements[0];"""


def compile_link(locator: Locator, scope: ScriptScope) -> str:
    """Links in document order; first whose text or href matches wins."""
    attribute = LINK_ATTRIBUTES[locator.strategy]
    links = f"{scope.root}.links" if scope.root_is_document else _tag_collection(scope, LINK_TAG)
    return _first_match(links, match_expression(f"elements[i].{attribute}", locator))


def compile_text(locator: Locator, scope: ScriptScope) -> str:
    if _is_link(locator):
        return compile_link(locator, scope)
    return compile_attribute(locator, scope, "innerText")


def compile_url(locator: Locator, scope: ScriptScope) -> str:
    if not _is_link(locator):
        raise MissingWayOfFindingObjectException(
            f"{locator.element_name} element does not support {locator.strategy.value}",
            locator=locator.describe(),
        )
    return compile_link(locator, scope)


def compile_attribute(locator: Locator, scope: ScriptScope, attribute: Optional[str] = None) -> str:
    attribute = attribute or ATTRIBUTE_STRATEGIES[locator.strategy]
    if locator.strategy is Strategy.VALUE and locator.tag is None:
        tag = "INPUT"
    else:
        tag = _require_tag(locator)
    return _first_match(_tag_collection(scope, tag), match_expression(f"elements[i].{attribute}", locator))


def compile_xpath(locator: Locator, scope: ScriptScope) -> str:
    # Double quotes inside the expression become single quotes
    xpath = js_string(str(locator.value).replace('"', "'"))
    context = f"{scope.root}.documentElement" if scope.root_is_document else scope.root
    return f"""var result = {scope.document}.evaluate({xpath}, {context}, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null);
var element = result ? result.singleNodeValue : null;"""


def _css_quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


COMPILERS: Dict[Strategy, Callable[[Locator, ScriptScope], str]] = {
    Strategy.ID: compile_id,
    Strategy.INDEX: compile_index,
    Strategy.NAME: compile_name,
    Strategy.VALUE: compile_attribute,
    Strategy.TEXT: compile_text,
    Strategy.URL: compile_url,
    Strategy.CLASS: compile_class,
    Strategy.XPATH: compile_xpath,
    Strategy.TITLE: compile_attribute,
    Strategy.ALT: compile_attribute,
    Strategy.SRC: compile_attribute,
    Strategy.ACTION: compile_attribute,
}


def compile_locator(locator: Locator, scope: Optional[ScriptScope] = None) -> ScriptFragment:
    """Compile ``locator`` into a fragment defining ``element`` within ``scope``."""
    scope = scope or ScriptScope.top()
    compiler = COMPILERS.get(locator.strategy)
    if compiler is None:
        raise MissingWayOfFindingObjectException(
            f"{locator.element_name} element does not support {locator.strategy.value}",
            locator=locator.describe(),
        )
    return ScriptFragment(compiler(locator, scope))


def compile_current_root(scope: ScriptScope) -> ScriptFragment:
    """Fragment binding ``element`` to the scope root itself (the entered cell)."""
    return ScriptFragment(f"var element = {scope.root};")


# Table cells

def _table_expression(table: Locator, scope: ScriptScope) -> str:
    if table.strategy is Strategy.ID:
        return f"{scope.document}.getElementById({js_string(_require_literal(table))})"
    if table.strategy is Strategy.INDEX:
        return f"{scope.document}.getElementsByTagName('TABLE')[{table.zero_based_index}]"
    raise MissingWayOfFindingObjectException(
        f"Table element does not support {table.strategy.value}",
        locator=table.describe(),
    )


def _row_statements(row: RowPosition, scope: ScriptScope) -> str:
    if row.strategy is Strategy.ID:
        return f"var cellRow = {scope.document}.getElementById({js_string(row.value)});"
    if row.strategy is Strategy.INDEX:
        if row.table is None:
            raise MissingWayOfFindingObjectException(
                f"TableRow with index {row.value} has no table to be found in"
            )
        return f"""var cellTable = {_table_expression(row.table, scope)};
var cellRow = cellTable ? cellTable.rows[{int(row.value) - 1}] : undefined;"""
    raise MissingWayOfFindingObjectException(f"TableRow element does not support {row.strategy.value}")


def compile_cell(cell: CellPosition, scope: Optional[ScriptScope] = None) -> ScriptFragment:
    """
    Two-stage cell resolution: the owning row first, then the cell index.

    A cell addressed by id needs no row. The fragment binds ``cell``.
    """
    scope = scope or ScriptScope.top()
    if scope.in_cell:
        raise MissingWayOfFindingObjectException(f"Cannot resolve {cell.describe()} inside {scope.cell_label}")
    if cell.strategy is Strategy.ID:
        return ScriptFragment(
            f"var cell = {scope.document}.getElementById({js_string(cell.value)});",
            defines="cell",
        )
    if cell.strategy is not Strategy.INDEX:
        raise MissingWayOfFindingObjectException(f"Unable to use {cell.strategy.value} to find TableCell")
    if cell.row is None:
        raise MissingWayOfFindingObjectException(f"Unable to use {cell.strategy.value} to find TableCell without a row")
    text = f"""{_row_statements(cell.row, scope)}
var cell = cellRow ? cellRow.cells[{int(cell.value) - 1}] : undefined;"""
    return ScriptFragment(text, defines="cell")


__all__ = [
    "COMPILERS",
    "compile_locator",
    "compile_cell",
    "compile_current_root",
    "match_expression",
]
