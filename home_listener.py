import logging

from config import HOME_LIST_FALLBACK, LISTING_PRODUCT_BOX, LISTING_PRODUCT_LINK, PROMO_LINK, PROMO_SLIDER
from extractors import extract_product_context
from normalizer import resolve_block_title, resolve_list_name
from search_listener import is_search_page

logger = logging.getLogger(__name__)


def resolve_promo_name(page, link):
    title = page.attr(link, "title").strip()
    if title:
        return title

    img = page.find(link, "img")
    if img is not None:
        alt = page.attr(img, "alt").strip()
        if alt:
            return alt

    return page.text(link)


class HomeListener:
    """Product clicks in sliders/listings and promotion clicks on CMS pages."""

    def __init__(self, session):
        self.session = session

    def init(self):
        page = self.session.page
        page.add_event_listener("click", self.on_product_click)
        page.add_event_listener("click", self.on_promo_click)

    def on_product_click(self, event):
        page = event.page
        if is_search_page(page):
            return

        link = page.closest(event.target, LISTING_PRODUCT_LINK)
        if link is None:
            return

        product_box = page.closest(link, LISTING_PRODUCT_BOX)
        if product_box is None:
            return

        item = extract_product_context(page, product_box, allow_trigger_text=False)
        if not item.item_name:
            item.item_name = self.session.product_store.lookup_name(item.item_id)
        if item.is_empty():
            logger.debug("Listing click without product context")
            return

        list_name = resolve_list_name(page, product_box, HOME_LIST_FALLBACK)
        item.item_list_id = list_name
        item.item_list_name = list_name

        self.session.normalizer.push_event(
            "select_item",
            {
                "item_list_id": list_name,
                "item_list_name": list_name,
                "items": [item.to_item()],
            },
        )

    def on_promo_click(self, event):
        page = event.page
        link = page.closest(event.target, PROMO_LINK)
        if link is None:
            return

        promo_name = resolve_promo_name(page, link)
        if not promo_name:
            return

        self.session.normalizer.push_event(
            "select_promotion",
            promotion_name=promo_name,
            promotion_id=page.attr(link, "href"),
            creative_name=resolve_block_title(page, event.target, PROMO_SLIDER),
        )
