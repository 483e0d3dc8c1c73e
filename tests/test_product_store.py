from extractors import ProductContext
from page import Page
from product_store import ProductContextStore

LISTING = """
<div class="product-box" data-product-id="uuid-1" data-product-number="SW1">
    <span class="product-name">First</span>
</div>
<div class="product-box" data-product-number="SW2">
    <span class="product-box-title">Second</span>
</div>
<div class="product-box" data-product-id="uuid-3"></div>
"""


def test_collect_builds_id_and_number_maps():
    store = ProductContextStore(Page(LISTING))
    store.init()

    assert store.by_id == {"uuid-1": "First"}
    assert store.by_number == {"SW1": "First", "SW2": "Second"}


def test_init_is_idempotent():
    store = ProductContextStore(Page(LISTING))
    store.init()
    store.by_id.clear()
    store.init()

    assert store.by_id == {}


def test_resolve_fills_name_from_caches():
    store = ProductContextStore(Page(LISTING))
    store.init()

    assert store.resolve(ProductContext(item_id="uuid-1")).item_name == "First"
    assert store.resolve(ProductContext(item_id="SW2")).item_name == "Second"


def test_resolve_takes_id_and_name_from_last_click():
    store = ProductContextStore(Page(LISTING))
    store.init()
    store.record_last_clicked(ProductContext(item_id="SW1000", item_name="Widget", price=5), "uuid-w")

    resolved = store.resolve(ProductContext(quantity=3))

    assert resolved.item_id == "SW1000"
    assert resolved.item_name == "Widget"
    assert resolved.quantity == 3
    assert resolved.get_price() == 5


def test_resolve_matches_last_click_by_product_id():
    store = ProductContextStore(Page(LISTING))
    store.record_last_clicked(ProductContext(item_id="SW1000", item_name="Widget"), "uuid-w")

    resolved = store.resolve(ProductContext(item_id="uuid-w", quantity=2))

    assert resolved.item_id == "SW1000"
    assert resolved.quantity == 2


def test_resolve_prefers_cache_name_for_other_products():
    store = ProductContextStore(Page(LISTING))
    store.init()
    store.record_last_clicked(ProductContext(item_id="SW1000", item_name="Widget"), "uuid-w")

    resolved = store.resolve(ProductContext(item_id="uuid-1"))

    assert resolved.item_id == "uuid-1"
    assert resolved.item_name == "First"


def test_resolve_never_invents_data():
    store = ProductContextStore(Page(LISTING))
    store.init()

    assert store.resolve(ProductContext()).is_empty()
    resolved = store.resolve(ProductContext(item_id="unknown"))
    assert resolved.item_id == "unknown"
    assert resolved.item_name == ""


def test_record_last_clicked_updates_id_cache():
    store = ProductContextStore(Page(LISTING))
    store.record_last_clicked(ProductContext(item_id="SW1000", item_name="Widget"), "uuid-w")

    assert store.lookup_name("uuid-w") == "Widget"
    assert store.lookup_name("SW1000") == "Widget"
    assert store.lookup_name("") == ""


def test_collect_names_trigger_with_own_id_from_enclosing_box():
    store = ProductContextStore(
        Page('<div class="product-box"><span class="product-name">Pan</span><button data-product-id="uuid-1">Buy</button></div>')
    )
    store.init()

    assert store.lookup_name("uuid-1") == "Pan"
