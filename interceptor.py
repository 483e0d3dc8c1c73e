import logging
import re
from urllib.parse import parse_qsl, urlparse

from config import ADD_LINE_ITEM_PATTERN
from extractors import ProductContext

logger = logging.getLogger(__name__)

LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def _iter_body_fields(body):
    if body is None:
        return []

    if isinstance(body, bytes):
        body = body.decode("utf-8")

    if isinstance(body, str):
        return parse_qsl(body, keep_blank_values=True)

    if isinstance(body, dict):
        fields = []
        for key, value in body.items():
            if isinstance(value, (list, tuple)):
                fields.extend((key, item) for item in value)
            else:
                fields.append((key, value))
        return fields

    return [(key, value) for key, value in body]


def _parse_quantity(value):
    match = LEADING_INTEGER.match(str(value))
    if match is None:
        return None
    quantity = int(match.group(1))
    if quantity > 0:
        return quantity
    return None


def _collect_line_item_fields(fields, item_id, quantity):
    for key, value in fields:
        key = str(key)
        if not item_id and key.endswith("[id]") and value:
            item_id = str(value).strip()
        elif quantity is None and key.endswith("[quantity]"):
            quantity = _parse_quantity(value)
    return item_id, quantity


def extract_line_item_fields(body, url=""):
    """
    Pulls the line item id and quantity out of an add-line-item request.

    The body may be form data (a mapping or a sequence of pairs), a
    URL-encoded string or missing entirely. Keys are matched on their
    "[id]" / "[quantity]" suffix since the prefix varies. The first usable
    value wins. Anything unparseable means "not found": quantity 1, no id.
    """
    item_id = ""
    quantity = None

    try:
        item_id, quantity = _collect_line_item_fields(_iter_body_fields(body), item_id, quantity)
    except Exception as e:
        logger.debug(f"Unparseable line item request body: {e}")

    if not item_id:
        try:
            query_fields = parse_qsl(urlparse(url).query, keep_blank_values=True)
            item_id, _ = _collect_line_item_fields(query_fields, item_id, quantity)
            if not item_id:
                item_id = next((str(value) for key, value in query_fields if key == "id" and value), "")
        except Exception as e:
            logger.debug(f"Unparseable line item request url {url}: {e}")

    return item_id, quantity or 1


def is_add_line_item(request, response):
    return ADD_LINE_ITEM_PATTERN in request.url and response.ok


class NetworkInterceptor:
    """
    Correlates completed add-line-item requests with the last clicked
    product and emits add_to_cart.

    Correlation is by "most recent click": if a second add-to-cart click
    lands before the first request completes, the first completion is
    attributed to the second product. The page exposes no request id to do
    better.
    """

    def __init__(self, session):
        self.session = session
        self.observer = None

    def install(self):
        if self.session.interceptor_installed:
            logger.debug("Network interceptor already installed")
            return False

        self.session.interceptor_installed = True
        self.observer = self.session.transport.observe(is_add_line_item, self.on_line_item_added)
        return True

    def on_line_item_added(self, request, response):
        item_id, quantity = extract_line_item_fields(request.body, request.url)
        logger.debug(f"Add-to-cart request completed: id={item_id!r} quantity={quantity}")

        context = self.session.product_store.resolve(ProductContext(item_id=item_id, quantity=quantity))
        if context.is_empty():
            logger.debug("No product context for completed add-to-cart request")
            return None

        return self.session.normalizer.build_item_event("add_to_cart", context, quantity)
