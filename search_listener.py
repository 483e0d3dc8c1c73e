import logging

from config import (
    SEARCH_DEBOUNCE_MS,
    SEARCH_INPUT,
    SEARCH_MIN_TERM_LENGTH,
    SEARCH_OVERLAY,
    SEARCH_RESULT_AREA,
    SEARCH_RESULTS_LIST,
    SEARCH_SUGGEST_LIST,
)
from extractors import extract_product_context

logger = logging.getLogger(__name__)


def is_search_page(page):
    if "/search" in page.path:
        return True
    return "search" in page.query_params


class SearchListener:
    def __init__(self, session, debounce_ms=SEARCH_DEBOUNCE_MS):
        self.session = session
        self.debounce_ms = debounce_ms
        self.input = None
        self.last_term = ""
        self.pending = None

    def init(self):
        page = self.session.page
        self.input = page.query(SEARCH_INPUT)
        if self.input is not None:
            page.add_event_listener("input", self.on_input)
        page.add_event_listener("click", self.on_select_item)

    def on_input(self, event):
        page = event.page
        if not page.matches(event.target, SEARCH_INPUT):
            return

        self.input = event.target
        term = page.value(event.target).strip()
        if len(term) < SEARCH_MIN_TERM_LENGTH or term == self.last_term:
            return

        if self.pending is not None:
            self.pending.cancel()
        self.pending = self.session.scheduler.call_later(self.debounce_ms, lambda: self.emit_search(term))

    def emit_search(self, term):
        self.pending = None
        self.last_term = term
        logger.debug(f"Search term settled: {term!r}")

        self.session.normalizer.push_event(
            "search",
            {
                "item_list_id": SEARCH_SUGGEST_LIST,
                "item_list_name": SEARCH_SUGGEST_LIST,
                "items": self.collect_overlay_items(),
            },
            require_items=False,
            search_term=term,
        )

    def collect_overlay_items(self):
        page = self.session.page
        overlay = page.query(SEARCH_OVERLAY)
        if overlay is None:
            return []

        items = []
        for position, link in enumerate(page.find_all(overlay, "a"), start=1):
            item = self.build_item(link)
            if item.is_empty():
                continue
            item.index = position
            items.append(item.to_item())
        return items

    def build_item(self, link):
        page = self.session.page
        context = extract_product_context(page, link)
        if not context.item_name:
            context.item_name = self.session.product_store.lookup_name(context.item_id)

        return context

    def resolve_search_term(self):
        page = self.session.page
        if self.input is not None:
            term = page.value(self.input).strip()
            if term:
                return term
        return (page.query_params.get("search") or [""])[0]

    def on_select_item(self, event):
        page = event.page
        link = page.closest(event.target, "a")
        if link is None:
            return

        is_overlay_click = page.closest(event.target, SEARCH_OVERLAY) is not None
        is_results_click = is_search_page(page) and page.closest(event.target, SEARCH_RESULT_AREA) is not None
        if not is_overlay_click and not is_results_click:
            return

        item = self.build_item(link)
        if item.is_empty():
            logger.debug("Search result click without product context")
            return

        list_name = SEARCH_SUGGEST_LIST if is_overlay_click else SEARCH_RESULTS_LIST
        self.session.normalizer.push_event(
            "select_item",
            {
                "item_list_id": list_name,
                "item_list_name": list_name,
                "items": [item.to_item()],
            },
            search_term=self.resolve_search_term(),
        )
