"""
PageScripter - the scripting session.

Owns one scripting host (and so one browser document) and turns element
operations into compile -> compose -> execute round trips. Operations that
may navigate are run through the page-load synchronizer.

Example:
    >>> from scripter import PageScripter
    >>> from models import Locator, Strategy
    >>> scripter = PageScripter.start("https://example.com")
    >>> search = Locator(Strategy.NAME, "q", tag="INPUT", element_name="TextField")
    >>> scripter.set_text(search, "safari")
    >>> scripter.click_element(Locator(Strategy.VALUE, "Search", tag="INPUT"))
"""
from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Callable, Optional, TypeVar

from error_handling import MissingWayOfFindingObjectException, UnknownObjectException
from execution_protocol import ExecutionProtocol
from host_provider import ScriptingHost, create_scripting_host
from locator_compiler import compile_cell, compile_current_root, compile_locator
from models import CellPosition, Locator, SentinelKind
from page_load import PageLoadSynchronizer
from script_composer import ScriptFragment, ScriptScope, compose, compose_plain, js_string, sentinel_return
from scripter_config import ScripterConfig
from system_events import SystemEvents
from utils.event_logger import EventLogger


T = TypeVar("T")

OPTION_FIELDS = ("text", "value")

HIGHLIGHT_COLOR = "yellow"

CLICK_LINK_FUNCTIONS = """function baseTarget() {
  var bases = %(document)s.getElementsByTagName('BASE');
  if (bases.length > 0) {
    return bases[0].target;
  } else {
    return;
  }
}
function undefinedTarget(target) {
  return target == undefined || target == '';
}
function topTarget(target) {
  return undefinedTarget(target) || target == '_top';
}
function nextLocation(element) {
  var target = element.target;
  if (undefinedTarget(target) && baseTarget()) {
    top[baseTarget()].location = element.href;
  } else if (topTarget(target)) {
    top.location = element.href;
  } else {
    top[target].location = element.href;
  }
}"""


def as_bool(value: Any) -> bool:
    """Host replies arrive as booleans or as their text form."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class PageScripter:
    """
    Scripting session bound to one host and one script scope.

    Frame and table-cell views share the host, configuration and logger of
    the session they were derived from.
    """

    def __init__(
        self,
        host: ScriptingHost,
        config: Optional[ScripterConfig] = None,
        scope: Optional[ScriptScope] = None,
        event_logger: Optional[EventLogger] = None,
        system_events: Optional[SystemEvents] = None,
        sleep: Callable[[float], None] = time.sleep,
        cell: Optional[CellPosition] = None,
    ):
        self.host = host
        self.config = config or ScripterConfig()
        self.scope = scope or ScriptScope.top()
        self.events = event_logger or EventLogger(
            debug_mode=self.config.logging.debug_mode,
            max_history=self.config.logging.max_history,
        )
        self.sleep = sleep
        self.cell = cell
        self.protocol = ExecutionProtocol(host, self.events)
        # Navigation is always observed on the top-level document
        self.page_load = PageLoadSynchronizer(
            self.protocol,
            self.config.timing,
            scope=ScriptScope.top(),
            sleep=sleep,
            event_logger=self.events,
        )
        self.system_events = system_events or SystemEvents(self.config.host, event_logger=self.events)

    @classmethod
    def from_config(cls, config: Optional[ScripterConfig] = None) -> PageScripter:
        """Create the configured host, make sure a window is ready, and wrap it."""
        config = config or ScripterConfig()
        host = create_scripting_host(config.host)
        host.ensure_window_ready()
        scripter = cls(host, config)
        scripter.events.system_info(
            f"Scripting host ready: {config.host.host_type}",
            app_name=config.host.app_name,
        )
        return scripter

    @classmethod
    def start(cls, url: Optional[str] = None, config: Optional[ScripterConfig] = None) -> PageScripter:
        scripter = cls.from_config(config)
        if url:
            scripter.navigate_to(url)
        return scripter

    def __enter__(self) -> PageScripter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.host.close()

    def _derive(self, scope: ScriptScope, cell: Optional[CellPosition] = None) -> PageScripter:
        return PageScripter(
            self.host,
            self.config,
            scope=scope,
            event_logger=self.events,
            system_events=self.system_events,
            sleep=self.sleep,
            cell=cell,
        )

    # Composition

    def _fragment(self, locator: Optional[Locator]) -> ScriptFragment:
        if locator is not None:
            return compile_locator(locator, self.scope)
        if not self.scope.in_cell:
            raise MissingWayOfFindingObjectException("No locator given and no table cell entered")
        return compile_current_root(self.scope)

    def operate(self, locator: Optional[Locator], operation: str) -> str:
        """Composed script running ``operation`` on the element ``locator`` finds."""
        return compose(self._fragment(locator), operation, self.scope)

    def _run(self, locator: Optional[Locator], operation: str) -> Any:
        target = locator if locator is not None else self.cell
        return self.protocol.execute(self.operate(locator, operation), target)

    def execute(self, body: str) -> Any:
        """Run a script body that locates nothing, in this scope."""
        return self.protocol.execute(compose_plain(body, self.scope))

    # Contexts

    def for_frame(self, name: str) -> PageScripter:
        """
        Scripter for the frame called ``name``.

        Raises:
            UnknownFrameException: the frame does not exist
        """
        frame_scope = self.scope.enter_frame(name)
        self.protocol.execute(
            compose_plain(f"""if ({frame_scope.window} == undefined) {{
  {sentinel_return(SentinelKind.FRAME_NOT_FOUND)}
}}""", self.scope),
            name,
        )
        self.events.frame_entered(name)
        return self._derive(frame_scope)

    def for_table_cell(self, cell: CellPosition) -> PageScripter:
        """Scripter whose lookups resolve inside ``cell``; pass ``None`` as locator to address the cell."""
        resolution = compile_cell(cell, self.scope)
        self.events.cell_entered(cell.describe())
        return self._derive(self.scope.enter_cell(resolution, cell.describe()), cell=cell)

    # Navigation

    def url(self) -> str:
        return self.host.current_url()

    def navigate_to(self, url: str, extra_action: Optional[Callable[[], Any]] = None) -> None:
        self.page_load.wait(lambda: self.host.navigate(url), extra_action)

    def reload(self) -> None:
        self.page_load.wait(lambda: self.execute("window.location.reload();"))

    # Document

    def document_text(self) -> Any:
        return self.execute(f"return {self.scope.document}.getElementsByTagName('BODY').item(0).innerText;")

    def document_html(self) -> Any:
        return self.execute(f"return {self.scope.document}.documentElement.outerHTML;")

    def document_title(self) -> Any:
        return self.execute(f"return {self.scope.document}.title;")

    # Element reads

    def get_text_for(self, locator: Optional[Locator]) -> Any:
        return self._run(locator, "return element.innerText;")

    def get_html_for(self, locator: Optional[Locator]) -> Any:
        return self._run(locator, "return element.innerHTML;")

    def get_value_for(self, locator: Optional[Locator]) -> Any:
        return self._run(locator, "return element.value;")

    def get_attribute(self, name: str, locator: Optional[Locator]) -> Any:
        return self._run(locator, f"return element.getAttribute({js_string(name)});")

    def checkbox_is_checked(self, locator: Locator) -> bool:
        return as_bool(self._run(locator, "return element.checked;"))

    def element_disabled(self, locator: Locator) -> bool:
        return as_bool(self._run(locator, "return element.disabled;"))

    def element_exists(self, locator: Optional[Locator], operation: str = "") -> bool:
        """True when the element is found (and ``operation`` did not signal otherwise)."""
        try:
            self._run(locator, operation)
        except UnknownObjectException:
            return False
        return True

    # Focus and highlight

    def focus(self, locator: Optional[Locator]) -> None:
        self._run(locator, "element.focus();")

    def blur(self, locator: Optional[Locator]) -> None:
        self._run(locator, "element.blur();")

    def highlight(self, locator: Optional[Locator], action: Callable[[], T]) -> T:
        """Paint the element while ``action`` runs; the original color is restored afterwards."""
        self._run(locator, f"""element.originalColor = element.style.backgroundColor;
element.style.backgroundColor = {js_string(HIGHLIGHT_COLOR)};""")
        try:
            return action()
        finally:
            self.protocol.execute_ignoring(
                self.operate(locator, "element.style.backgroundColor = element.originalColor;")
            )

    # Select lists

    def _option_field(self, how: str) -> str:
        if how not in OPTION_FIELDS:
            raise MissingWayOfFindingObjectException(f"Option element does not support {how}")
        return how

    def select_option(self, locator: Locator, how: str, what: str) -> None:
        """Select the option whose ``how`` (text or value) equals ``what``; change fires only on a new selection."""
        field_name = self._option_field(how)
        self._run(locator, f"""var selected = -1;
var previous_selection = -2;
for (var i = 0; i < element.options.length; i++) {{
  if (element.options[i].selected) {{
    previous_selection = i;
  }}
  if (element.options[i].{field_name} == {js_string(what)}) {{
    element.options[i].selected = true;
    selected = i;
  }}
}}
if (selected == -1) {{
  {sentinel_return(SentinelKind.ELEMENT_NOT_FOUND)}
}} else if (previous_selection != selected) {{
  element.selectedIndex = selected;
  dispatchOnChange(element.options[selected]);
}}""")

    def option_exists(self, locator: Locator, how: str, what: str) -> bool:
        field_name = self._option_field(how)
        return self.element_exists(locator, f"""var option_found = false;
for (var i = 0; i < element.options.length; i++) {{
  if (element.options[i].{field_name} == {js_string(what)}) {{
    option_found = true;
  }}
}}
if (!option_found) {{
  {sentinel_return(SentinelKind.ELEMENT_NOT_FOUND)}
}}""")

    def option_selected(self, locator: Locator, how: str, what: str) -> bool:
        field_name = self._option_field(how)
        return as_bool(self._run(locator, f"""var selected = false;
for (var i = 0; i < element.options.length; i++) {{
  if (element.options[i].{field_name} == {js_string(what)} && element.options[i].selected) {{
    selected = true;
  }}
}}
return selected;"""))

    # Text input

    def clear_text_input(self, locator: Locator) -> None:
        self._run(locator, "element.value = '';")

    def append_text_input(self, value: str, locator: Locator) -> None:
        self.sleep(self.config.timing.typing_lag)
        self._run(locator, f"""element.value += {js_string(value)};
dispatchOnChange(element);
element.setSelectionRange(element.value.length, element.value.length);""")

    def set_text(self, locator: Locator, value: str) -> None:
        """Clear the field and type ``value`` one character at a time."""
        def _type():
            self.clear_text_input(locator)
            for char in value:
                self.append_text_input(char, locator)
        self.highlight(locator, _type)

    # Clicks and forms

    def click_element(self, locator: Optional[Locator]) -> None:
        # Image inputs with an onclick fire twice unless these branches are exclusive
        document = self.scope.document
        self.page_load.wait(lambda: self._run(locator, f"""if (element.click) {{
  element.click();
}} else {{
  if (element.onclick) {{
    var event = {document}.createEvent('HTMLEvents');
    event.initEvent('click', true, true);
    element.onclick(event);
  }} else {{
    var event = {document}.createEvent('MouseEvents');
    event.initEvent('click', true, true);
    element.dispatchEvent(event);
  }}
}}"""))

    def _link(self, locator: Locator) -> Locator:
        if locator.tag is None:
            return replace(locator, tag="A")
        return locator

    def click_link(self, locator: Locator) -> None:
        """Follow a link honoring onclick, its target, and any <BASE target>."""
        document = self.scope.document
        operation = CLICK_LINK_FUNCTIONS % {"document": document} + f"""
var click = {document}.createEvent('HTMLEvents');
click.initEvent('click', true, true);
if (element.onclick) {{
  if (false != element.onclick(click)) {{
    nextLocation(element);
  }}
}} else {{
  nextLocation(element);
}}"""
        link = self._link(locator)
        self.page_load.wait(lambda: self._run(link, operation))

    def click_link_jquery(self, locator: Locator) -> None:
        link = self._link(locator)
        self.page_load.wait(lambda: self._run(link, "$(element).trigger('click');"))

    def submit_form(self, locator: Locator) -> None:
        self.page_load.wait(lambda: self._run(locator, "element.submit();"))

    # Browser chrome

    def click_alert(self) -> None:
        self.system_events.click_alert()

    def click_security_warning(self, label: str) -> Optional[str]:
        return self.system_events.click_security_warning(label)


__all__ = ["PageScripter", "as_bool"]
