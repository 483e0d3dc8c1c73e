import logging

from cart_listener import CartListener
from checkout_listener import CheckoutListener
from home_listener import HomeListener
from search_listener import SearchListener
from session import TrackingSession

logger = logging.getLogger(__name__)

LISTENERS = [
    ("checkout", CheckoutListener),
    ("search", SearchListener),
    ("cart", CartListener),
    ("home", HomeListener),
]


class DataLayerTracker:
    """
    Owns the tracking session and wires every feature listener onto the
    current page. Call navigate() on a page change: the session state is
    rebuilt and the listeners are registered against the new page.
    """

    def __init__(self, page, transport=None, scheduler=None, forwarders=None, debug=None, session_id=None):
        kwargs = {"transport": transport, "scheduler": scheduler, "forwarders": forwarders, "session_id": session_id}
        if debug is not None:
            kwargs["debug"] = debug
        self.session = TrackingSession(page, **kwargs)
        self.listeners = {}
        self.installed = False

    @property
    def page(self):
        return self.session.page

    def install(self):
        if self.installed:
            return self.listeners
        self.installed = True

        logger.debug("Initializing datalayer listeners")
        for name, listener_cls in LISTENERS:
            listener = listener_cls(self.session)
            try:
                listener.init()
            except Exception as e:
                logger.error(f"Failed to initialize {name} listener: {e}")
                continue
            self.listeners[name] = listener

        logger.debug(f"Initialized listeners: {', '.join(self.listeners)}")
        return self.listeners

    def uninstall(self):
        for listener in self.listeners.values():
            self.page.remove_event_listeners(listener)

        cart = self.listeners.get("cart")
        if cart is not None and cart.interceptor.observer is not None:
            self.session.transport.unobserve(cart.interceptor.observer)

        search = self.listeners.get("search")
        if search is not None and search.pending is not None:
            search.pending.cancel()

        self.listeners = {}
        self.installed = False

    def navigate(self, page, transport=None):
        self.uninstall()
        self.session.navigate(page, transport)
        return self.install()
