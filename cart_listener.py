import logging

from config import BUY_TRIGGER, REMOVE_LINE_ITEM_PATTERNS, WISHLIST_TRIGGER
from extractors import extract_product_context, find_product_container, normalize_quantity
from interceptor import NetworkInterceptor, extract_line_item_fields

logger = logging.getLogger(__name__)


def extract_form_quantity(fields, default=1):
    quantity = default
    for key, value in fields:
        if not str(key).endswith("[quantity]"):
            continue
        try:
            quantity = normalize_quantity(float(str(value)))
        except (TypeError, ValueError):
            continue
    return quantity


class CartListener:
    """
    Add to cart, remove from cart and wishlist.

    A buy click only remembers the product; add_to_cart is emitted by the
    network interceptor once the line item request has succeeded.
    """

    def __init__(self, session):
        self.session = session
        self.interceptor = NetworkInterceptor(session)

    def init(self):
        page = self.session.page
        self.session.product_store.init()
        page.add_event_listener("click", self.on_buy_click, capture=True)
        self.interceptor.install()
        page.add_event_listener("submit", self.on_remove_submit, capture=True)
        page.add_event_listener("click", self.on_wishlist_click)

    def on_buy_click(self, event):
        page = event.page
        button = page.closest(event.target, BUY_TRIGGER)
        if button is None:
            return

        context = extract_product_context(page, button, allow_trigger_text=False)
        if context.is_empty():
            logger.debug("Add-to-cart click without product context")
            return

        container = find_product_container(page, button)
        product_id = page.attr(button, "data-product-id") or page.attr(container, "data-product-id")
        if not product_id:
            form = page.closest(button, "form")
            if form is not None:
                product_id, _ = extract_line_item_fields(page.form_data(form))
        self.session.product_store.record_last_clicked(context, product_id)

    def on_remove_submit(self, event):
        page = event.page
        form = page.closest(event.target, "form")
        if form is None:
            return

        action = page.attr(form, "action")
        if not any(pattern in action for pattern in REMOVE_LINE_ITEM_PATTERNS):
            return

        context = extract_product_context(page, form, allow_trigger_text=False)
        if not context.item_name:
            context.item_name = self.session.product_store.lookup_name(context.item_id)
        if context.is_empty():
            logger.debug(f"Remove-from-cart submit to {action} without product context")
            return

        fields = event.data.get("fields") or page.form_data(form)
        quantity = extract_form_quantity(fields)
        context.quantity = quantity

        self.session.normalizer.build_item_event("remove_from_cart", context, quantity)

    def on_wishlist_click(self, event):
        page = event.page
        trigger = page.closest(event.target, WISHLIST_TRIGGER)
        if trigger is None:
            return

        context = extract_product_context(page, trigger, allow_trigger_text=False)
        if not context.item_name:
            context.item_name = self.session.product_store.lookup_name(context.item_id)
        if context.is_empty():
            logger.debug("Wishlist click without product context")
            return

        self.session.normalizer.build_item_event("add_to_wishlist", context, 1)
