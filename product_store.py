import logging

from config import PRODUCT_IDENTITY
from extractors import ProductContext, resolve_item_name

logger = logging.getLogger(__name__)


class ProductContextStore:
    """
    Per-page cache of product names keyed by product id and product number,
    plus the product behind the most recent add-to-cart click.

    Only elements present when the store is initialized are collected;
    anything loaded later is resolved live from the interaction itself.
    """

    def __init__(self, page):
        self.page = page
        self.by_id = {}
        self.by_number = {}
        self.last = None
        self.last_product_id = ""
        self.initialized = False

    def init(self):
        if self.initialized:
            return
        self.initialized = True
        self.collect()

    def collect(self):
        for element in self.page.query_all(PRODUCT_IDENTITY):
            name = resolve_item_name(self.page, element, allow_trigger_text=False)
            if not name:
                continue

            product_id = self.page.attr(element, "data-product-id")
            product_number = self.page.attr(element, "data-product-number")

            if product_id:
                self.by_id.setdefault(product_id, name)
            if product_number:
                self.by_number.setdefault(product_number, name)

        logger.debug(f"Collected {len(self.by_id)} product ids and {len(self.by_number)} product numbers")

    def record_last_clicked(self, context: ProductContext, product_id: str = ""):
        self.last = context.model_copy(deep=True)
        self.last_product_id = product_id

        if context.item_name:
            if product_id:
                self.by_id[product_id] = context.item_name
            if context.item_id:
                self.by_id[context.item_id] = context.item_name

        logger.debug(f"Stored last clicked product: {context.to_item()}")

    def lookup_name(self, identifier):
        if not identifier:
            return ""
        return self.by_id.get(identifier) or self.by_number.get(identifier) or ""

    def _matches_last(self, identifier):
        if self.last is None:
            return False
        return identifier in (self.last.item_id, self.last_product_id)

    def resolve(self, partial: ProductContext) -> ProductContext:
        """
        Fills what the partial context is missing: the name from the id and
        number caches and then the last clicked product, the id from the
        last clicked product only. Nothing is made up.
        """
        if self.last is not None and (not partial.item_id or self._matches_last(partial.item_id)):
            resolved = self.last.model_copy(deep=True)
            resolved.quantity = partial.quantity
            if partial.item_name:
                resolved.item_name = partial.item_name
            if not resolved.item_name:
                resolved.item_name = self.lookup_name(self.last_product_id) or self.lookup_name(resolved.item_id)
            return resolved

        resolved = partial.model_copy(deep=True)

        if not resolved.item_name:
            resolved.item_name = self.lookup_name(resolved.item_id)

        if not resolved.item_name and self.last is not None:
            resolved.item_name = self.last.item_name

        return resolved
