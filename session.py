import logging
from uuid import uuid4

from config import DEBUG_MODE
from normalizer import EventNormalizer
from product_store import ProductContextStore
from scheduler import LoopScheduler
from transport import Transport

ENGINE_LOGGERS = (
    "cart_listener",
    "checkout_listener",
    "extractors",
    "forwarder",
    "home_listener",
    "interceptor",
    "normalizer",
    "page",
    "product_store",
    "scheduler",
    "search_listener",
    "tracker",
    "transport",
)


def apply_debug_mode(enabled):
    """Debug mode only turns verbose traces on; it never touches event content."""
    level = logging.DEBUG if enabled else logging.INFO
    for name in ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(level)


class TrackingSession:
    """
    Everything that lives for exactly one page view: the page and its
    sinks, the product cache, the interceptor flag and the transport it
    guards. navigate() throws all of it away for the next page.
    """

    def __init__(self, page, transport=None, scheduler=None, forwarders=None, debug=DEBUG_MODE, session_id=None):
        self.session_id = session_id or str(uuid4())
        self.scheduler = scheduler or LoopScheduler()
        self.forwarders = list(forwarders or [])
        self.debug = debug
        self.normalizer = EventNormalizer(self)
        apply_debug_mode(debug)
        self._load(page, transport)

    def _load(self, page, transport):
        self.page = page
        self.transport = transport or Transport()
        self.product_store = ProductContextStore(page)
        self.interceptor_installed = False

    def navigate(self, page, transport=None):
        self._load(page, transport)
