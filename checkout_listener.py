import copy
import logging

from config import METHOD_CONTAINER, METHOD_NAME, PAYMENT_INPUT, PRIMARY_SINK, SHIPPING_INPUT

logger = logging.getLogger(__name__)


def find_begin_checkout(sink):
    """Latest begin_checkout in the sink that has items, as the base for later checkout steps."""
    if not isinstance(sink, list):
        return None

    for entry in reversed(sink):
        if not isinstance(entry, dict) or entry.get("event") != "begin_checkout":
            continue

        ecommerce = entry.get("ecommerce") or {}
        items = ecommerce.get("items")
        if not isinstance(items, list) or not items:
            continue

        return {
            "ecommerce": copy.deepcopy(ecommerce),
            "user": copy.deepcopy(entry.get("user") or {}),
        }

    return None


def resolve_input_label(page, node):
    input_id = page.attr(node, "id")
    if input_id:
        for label in page.query_all("label[for]"):
            if page.attr(label, "for") == input_id:
                return page.text(label)

    container = page.closest(node, METHOD_CONTAINER)
    if container is not None:
        name = page.find(container, METHOD_NAME)
        if name is not None:
            return page.text(name)

    return ""


class CheckoutListener:
    def __init__(self, session):
        self.session = session
        self.base_payload = None

    def init(self):
        page = self.session.page
        self.base_payload = find_begin_checkout(page.window.get(PRIMARY_SINK))
        if self.base_payload is None:
            logger.debug("No begin_checkout in the dataLayer, checkout steps are not tracked")
            return False

        page.add_event_listener("change", self.on_change)
        return True

    def on_change(self, event):
        page = event.page
        node = event.target

        if page.matches(node, SHIPPING_INPUT):
            tier = resolve_input_label(page, node) or page.value(node)
            self.push_step("add_shipping_info", {"shipping_tier": tier})
        elif page.matches(node, PAYMENT_INPUT):
            payment_type = resolve_input_label(page, node) or page.value(node)
            self.push_step("add_payment_info", {"payment_type": payment_type})

    def push_step(self, event_name, extra_ecommerce):
        ecommerce = dict(copy.deepcopy(self.base_payload["ecommerce"]), **extra_ecommerce)
        self.session.normalizer.push_event(event_name, ecommerce, user=copy.deepcopy(self.base_payload["user"]))
