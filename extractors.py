import logging
import re
from typing import Optional, Union
from urllib.parse import urlparse

import orjson
from price_parser import Price
from pydantic import BaseModel, ConfigDict

from config import (
    PRODUCT_CONTAINER,
    PRODUCT_INFO_ATTRIBUTE,
    PRODUCT_LINK,
    PRODUCT_NAME,
    PRODUCT_NUMBER_LABEL,
    PRODUCT_PRICE,
)

logger = logging.getLogger(__name__)

SKU_PATTERN = re.compile(r"^[A-Z0-9.-]+$")
LABELLED_SKU_PATTERN = re.compile(r":\s*([A-Z0-9.-]+)")


class ProductContext(BaseModel):
    model_config = ConfigDict(extra="allow")

    item_id: str = ""
    item_name: str = ""
    quantity: Union[int, float] = 1
    index: Optional[int] = None
    item_list_id: Optional[str] = None
    item_list_name: Optional[str] = None

    def is_empty(self):
        return not self.item_id and not self.item_name

    def get_price(self):
        price = (self.model_extra or {}).get("price")
        if price is None or price == "":
            return None
        try:
            return float(price)
        except (TypeError, ValueError):
            return None

    def get_currency(self):
        return (self.model_extra or {}).get("currency") or ""

    def to_item(self):
        return self.model_dump(exclude_none=True)


def normalize_quantity(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def context_from_payload(payload):
    """
    Builds a context from a product-info payload. Identity fields are
    coerced to strings, everything else is kept as-is.
    """
    if not isinstance(payload, dict):
        return None

    fields = dict(payload)
    fields["item_id"] = str(fields.get("item_id") or "")
    fields["item_name"] = str(fields.get("item_name") or "").strip()
    fields["quantity"] = normalize_quantity(fields.get("quantity") or 1)

    if fields.get("index") is not None:
        try:
            fields["index"] = int(fields["index"])
        except (TypeError, ValueError):
            fields.pop("index")

    for key in ("item_list_id", "item_list_name"):
        if fields.get(key) is not None:
            fields[key] = str(fields[key])

    context = ProductContext(**fields)
    if context.is_empty():
        return None
    return context


def find_product_container(page, element):
    return page.closest(element, PRODUCT_CONTAINER)


def iter_product_containers(page, element):
    """Product containers around element, innermost first."""
    container = find_product_container(page, element)
    while container is not None:
        yield container
        container = find_product_container(page, container.parent)


def from_product_info_attribute(page, element):
    data_el = page.closest(element, f"[{PRODUCT_INFO_ATTRIBUTE}]")

    if data_el is None:
        container = find_product_container(page, element)
        if container is not None:
            data_el = page.find(container, f"[{PRODUCT_INFO_ATTRIBUTE}]")

    if data_el is None:
        return None

    data_json = page.attr(data_el, PRODUCT_INFO_ATTRIBUTE)
    if not data_json:
        return None

    try:
        payload = orjson.loads(data_json)
    except orjson.JSONDecodeError as e:
        logger.debug(f"Failed to parse {PRODUCT_INFO_ATTRIBUTE}: {e}. String: {data_json[:200]}")
        return None

    return context_from_payload(payload)


def from_container_attributes(page, element):
    container = find_product_container(page, element)
    if container is None:
        return None

    item_id = page.attr(container, "data-product-id") or page.attr(container, "data-product-number")
    if not item_id:
        return None

    return ProductContext(item_id=item_id.strip())


def extract_sku_from_label(text):
    match = LABELLED_SKU_PATTERN.search(text or "")
    if match:
        return match.group(1)
    return ""


def extract_sku_from_href(href):
    if not href:
        return ""

    segment = urlparse(href).path.rstrip("/").split("/")[-1]
    if segment and SKU_PATTERN.match(segment):
        return segment
    return ""


def from_structural_scrape(page, element):
    container = find_product_container(page, element)
    if container is None:
        return None

    for label in page.find_all(container, PRODUCT_NUMBER_LABEL):
        sku = extract_sku_from_label(page.text(label))
        if sku:
            return ProductContext(item_id=sku)

    for link in page.find_all(container, PRODUCT_LINK):
        sku = extract_sku_from_href(page.attr(link, "href"))
        if sku:
            return ProductContext(item_id=sku)

    return None


def resolve_item_name(page, element, allow_trigger_text=True):
    """
    Name from the innermost product container that has a name node. A
    trigger carrying its own product id is a container too, so the search
    continues outwards. Only when there is no container at all does the
    trigger's own text count.
    """
    found_container = False

    for container in iter_product_containers(page, element):
        found_container = True
        if page.matches(container, PRODUCT_NAME):
            return page.text(container)
        name = page.text(page.find(container, PRODUCT_NAME))
        if name:
            return name

    if found_container:
        return ""

    if allow_trigger_text:
        return page.text(element)
    return ""


def resolve_item_price(page, element):
    price_el = None
    for container in iter_product_containers(page, element):
        price_el = page.find(container, PRODUCT_PRICE)
        if price_el is not None:
            break

    if price_el is None:
        return None

    text = page.attr(price_el, "content") or page.text(price_el)
    return Price.fromstring(text).amount_float


RESOLVERS = [
    from_product_info_attribute,
    from_container_attributes,
    from_structural_scrape,
]


def extract_product_context(page, element, allow_trigger_text=True):
    context = ProductContext()

    if element is None:
        return context

    for resolver in RESOLVERS:
        try:
            result = resolver(page, element)
        except Exception as e:
            logger.debug(f"Resolver {resolver.__name__} failed: {e}")
            continue

        if result is not None and not result.is_empty():
            context = result
            break

    if not context.item_name:
        context.item_name = resolve_item_name(page, element, allow_trigger_text)

    if context.get_price() is None and not context.is_empty():
        try:
            price = resolve_item_price(page, element)
        except Exception as e:
            logger.debug(f"Failed to scrape price: {e}")
            price = None
        if price is not None:
            setattr(context, "price", price)

    logger.debug(f"Resolved product context: {context.to_item()}")
    return context
