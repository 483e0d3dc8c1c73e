import logging
import re
from urllib.parse import parse_qs, urlparse

import orjson
from selectolax.lexbor import LexborHTMLParser

from config import PRIMARY_SINK, SECONDARY_SINK

logger = logging.getLogger(__name__)

FORM_FIELDS = "input[name],select[name],textarea[name]"


class InteractionEvent:
    def __init__(self, type, target, page, data=None):
        self.type = type
        self.target = target
        self.page = page
        self.data = data or {}


def _clean_js_object_str(json_str):
    if not json_str:
        return ""
    json_str = re.sub(r",\s*([}\]])", r"\1", json_str)
    json_str = re.sub(r"([{,])\s*([a-zA-Z0-9_]+)\s*:", r'\1"\2":', json_str)
    json_str = json_str.replace("'", '"')
    json_str = json_str.replace("undefined", "null")
    return json_str


def extract_data_layer_pushes(parser):
    """
    Reads the objects the server-side renderer pushed into the dataLayer
    from inline scripts, in document order.
    """
    pushed = []
    for script in parser.css("script"):
        script_text = script.text()
        if not script_text or "dataLayer.push" not in script_text:
            continue

        for match in re.finditer(r"dataLayer\.push\((\{[\s\S]*?\})\s*\);", script_text):
            json_like_str = match.group(1)
            try:
                pushed.append(orjson.loads(json_like_str))
                continue
            except orjson.JSONDecodeError:
                pass

            try:
                pushed.append(orjson.loads(_clean_js_object_str(json_like_str)))
            except orjson.JSONDecodeError as e:
                logger.warning(f"Failed dataLayer.push object: {e}. String: {json_like_str[:200]}")

    return pushed


class Page:
    """
    A parsed storefront page plus the page-global state scripts share:
    the window globals (the sinks live there), form field values and the
    document-level event listeners.
    """

    def __init__(self, html: str, url: str = "", window: dict = None):
        self.parser = LexborHTMLParser(html)
        self.url = url
        self._values = {}
        self._listeners = []

        if window is None:
            window = {
                PRIMARY_SINK: extract_data_layer_pushes(self.parser),
                SECONDARY_SINK: [],
            }
        self.window = window

    @property
    def path(self):
        return urlparse(self.url).path

    @property
    def query_params(self):
        return parse_qs(urlparse(self.url).query)

    def query(self, selector):
        return self.parser.css_first(selector)

    def query_all(self, selector):
        return self.parser.css(selector)

    def matches(self, node, selector):
        if node is None:
            return False
        return node.mem_id in {match.mem_id for match in self.parser.css(selector)}

    def closest(self, node, selector):
        if node is None:
            return None

        candidates = {match.mem_id for match in self.parser.css(selector)}
        while node is not None:
            if node.mem_id in candidates:
                return node
            node = node.parent
        return None

    def find(self, node, selector):
        """First descendant of node matching selector (node itself excluded)."""
        for match in self.find_all(node, selector):
            return match
        return None

    def find_all(self, node, selector):
        if node is None:
            return []
        return [match for match in node.css(selector) if match.mem_id != node.mem_id]

    def text(self, node):
        if node is None:
            return ""
        return " ".join((node.text(deep=True) or "").split())

    def attr(self, node, name, default=""):
        if node is None:
            return default
        value = node.attributes.get(name)
        return value if value is not None else default

    def value(self, node):
        if node is None:
            return ""
        if node.mem_id in self._values:
            return self._values[node.mem_id]
        if node.tag == "textarea":
            return node.text(deep=True) or ""
        if node.tag == "select":
            option = node.css_first("option[selected]") or node.css_first("option")
            if option is None:
                return ""
            return self.attr(option, "value", default=self.text(option))
        return self.attr(node, "value")

    def set_value(self, node, value):
        self._values[node.mem_id] = value

    def form_data(self, form):
        fields = []
        for field in self.find_all(form, FORM_FIELDS):
            if self.attr(field, "type") in ("checkbox", "radio") and "checked" not in field.attributes:
                continue
            fields.append((self.attr(field, "name"), self.value(field)))
        return fields

    def add_event_listener(self, event_type, handler, capture=False):
        self._listeners.append((event_type, handler, capture))

    def remove_event_listener(self, event_type, handler, capture=False):
        self._listeners = [
            listener for listener in self._listeners if listener != (event_type, handler, capture)
        ]

    def remove_event_listeners(self, owner):
        """Drops every listener that is a method of owner."""
        self._listeners = [
            listener for listener in self._listeners if getattr(listener[1], "__self__", None) is not owner
        ]

    def _resolve_target(self, target):
        if isinstance(target, str):
            node = self.query(target)
            if node is None:
                raise ValueError(f"No element matches {target!r}")
            return node
        return target

    def dispatch(self, event_type, target, data=None):
        """
        Delivers an interaction to the document-level listeners, capture
        phase first. A failing handler is logged and never breaks the page.
        """
        event = InteractionEvent(event_type, self._resolve_target(target), self, data)

        listeners = [listener for listener in self._listeners if listener[0] == event_type]
        ordered = [listener for listener in listeners if listener[2]] + [
            listener for listener in listeners if not listener[2]
        ]

        for _, handler, _ in ordered:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Listener {getattr(handler, '__name__', handler)} failed on {event_type}: {e}")

        return event

    def click(self, target):
        return self.dispatch("click", target)

    def submit(self, target, fields=None):
        data = {"fields": fields} if fields is not None else None
        return self.dispatch("submit", target, data)

    def input(self, target, value):
        node = self._resolve_target(target)
        self.set_value(node, value)
        return self.dispatch("input", node, {"value": value})

    def change(self, target, value=None):
        node = self._resolve_target(target)
        if value is not None:
            self.set_value(node, value)
        return self.dispatch("change", node)
