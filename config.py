import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DEBUG_MODE = _env_flag("DATALAYER_DEBUG")
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "EUR")
SEARCH_DEBOUNCE_MS = int(os.getenv("SEARCH_DEBOUNCE_MS", "250"))
SEARCH_MIN_TERM_LENGTH = 2
ADD_LINE_ITEM_PATTERN = os.getenv("ADD_LINE_ITEM_PATTERN", "checkout/line-item/add")
REMOVE_LINE_ITEM_PATTERNS = ("checkout/line-item/delete", "line-item/remove")

FORWARDER_URL = os.getenv("FORWARDER_URL", "")
FORWARDER_WRITE_KEY = os.getenv("FORWARDER_WRITE_KEY", "")
FORWARDER_ENDPOINT = "/api/s/s2s/track"
FORWARDER_TIMEOUT = float(os.getenv("FORWARDER_TIMEOUT", "0.5"))
FORWARDER_VERIFY_SSL = _env_flag("FORWARDER_VERIFY_SSL", "true")

PRIMARY_SINK = "dataLayer"
SECONDARY_SINK = "_mtm"
SINK_NAMES = (PRIMARY_SINK, SECONDARY_SINK)

HOME_LIST_FALLBACK = "home_product_slider"
SEARCH_SUGGEST_LIST = "search_suggest"
SEARCH_RESULTS_LIST = "view_search_results"

PRODUCT_INFO_ATTRIBUTE = "data-product-info"

PRODUCT_CONTAINER = ",".join(
    [
        ".product-box",
        ".cms-product-box",
        ".product-detail",
        ".buy-widget",
        ".line-item",
        ".cart-item",
        ".search-suggest-product",
        "[data-product-id]",
        "[data-product-number]",
    ]
)

PRODUCT_IDENTITY = "[data-product-id],[data-product-number]"

PRODUCT_NAME = ",".join(
    [
        ".product-name",
        ".product-box-title",
        ".product-detail-name",
        ".product-title",
        ".line-item-label",
        ".search-suggest-product-name",
    ]
)

PRODUCT_NUMBER_LABEL = ",".join(
    [
        ".product-detail-ordernumber",
        ".product-number",
        ".line-item-ordernumber",
        ".line-item-product-number",
    ]
)

PRODUCT_LINK = ",".join(
    [
        "a.product-name",
        "a.product-image-link",
        "a.line-item-label",
        "a[href]",
    ]
)

PRODUCT_PRICE = ",".join(
    [
        ".product-price",
        ".product-detail-price",
        ".line-item-unit-price-value",
        "[itemprop='price']",
    ]
)

BUY_TRIGGER = ".btn-buy,[data-add-to-cart],button[data-product-id]"

WISHLIST_TRIGGER = ",".join(
    [
        "[data-wishlist-add]",
        "[data-wishlist-add-id]",
        "[data-add-to-wishlist]",
        ".product-wishlist-action",
        ".wishlist-add",
    ]
)

SEARCH_INPUT = "input[name='search'],input[type='search'],.js-search-field"
SEARCH_OVERLAY = ".search-suggest,.search-suggest-container"
SEARCH_RESULT_AREA = ".product-box,.cms-element-product-listing,.product-listing"

LISTING_BLOCK = ".cms-element-product-slider,.cms-element-product-listing"
LISTING_PRODUCT_LINK = ".cms-element-product-slider a,.cms-element-product-listing a"
LISTING_PRODUCT_BOX = ".product-box,.cms-product-box,.search-suggest-product"
BLOCK_TITLE = ".cms-element-title,.cms-block-title,.element-title"

PROMO_LINK = ".cms-element-image-slider a,.cms-element-image a,.cms-element-text a"
PROMO_SLIDER = ".cms-element-image-slider"

SHIPPING_INPUT = "input[name='shippingMethodId']"
PAYMENT_INPUT = "input[name='paymentMethodId']"
METHOD_CONTAINER = ",".join(
    [
        ".checkout-shipping-method",
        ".shipping-method",
        ".checkout-payment-method",
        ".payment-method",
    ]
)
METHOD_NAME = ".shipping-method-name,.payment-method-name,.method-name"
