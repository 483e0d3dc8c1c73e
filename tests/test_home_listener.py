from conftest import events
from home_listener import resolve_promo_name
from page import Page

HOME = """
<div class="cms-element-product-slider">
    <div class="cms-element-title">Bestsellers</div>
    <div class="product-box" data-product-number="SW500">
        <a class="product-name" href="/widget-pro/SW500">Widget Pro</a>
    </div>
    <div class="product-box">
        <a class="product-image-link" href="/no-identity"><img src="a.jpg"></a>
    </div>
</div>
<div class="cms-element-image-slider">
    <div class="cms-element-title">Spring Sale</div>
    <a href="/sale" title="Spring banner"><img class="banner" alt="Spring image" src="x.jpg"></a>
</div>
<div class="cms-element-image"><a href="/promo2" class="promo2"><img alt="Promo Two" src="y.jpg"></a></div>
<div class="cms-element-text"><a href="/promo3" class="promo3">  Read   more </a></div>
"""


def test_slider_product_click_selects_item(make_tracker):
    tracker = make_tracker(HOME)
    tracker.page.click(".product-name")

    sink = tracker.page.window["dataLayer"]
    assert sink[0] == {"ecommerce": None}
    assert sink[1] == {
        "event": "select_item",
        "ecommerce": {
            "item_list_id": "Bestsellers",
            "item_list_name": "Bestsellers",
            "items": [
                {
                    "item_id": "SW500",
                    "item_name": "Widget Pro",
                    "quantity": 1,
                    "item_list_id": "Bestsellers",
                    "item_list_name": "Bestsellers",
                }
            ],
        },
    }


def test_slider_product_without_identity_is_ignored(make_tracker):
    tracker = make_tracker(HOME)
    tracker.page.click(".product-image-link")

    assert tracker.page.window["dataLayer"] == []


def test_promo_click_uses_title_and_slider_creative(make_tracker):
    tracker = make_tracker(HOME)
    tracker.page.click(".banner")

    assert tracker.page.window["dataLayer"] == [
        {
            "event": "select_promotion",
            "promotion_name": "Spring banner",
            "promotion_id": "/sale",
            "creative_name": "Spring Sale",
        }
    ]


def test_promo_name_priority():
    page = Page(HOME)

    assert resolve_promo_name(page, page.query(".promo2")) == "Promo Two"
    assert resolve_promo_name(page, page.query(".promo3")) == "Read more"


def test_text_promo_has_empty_creative(make_tracker):
    tracker = make_tracker(HOME)
    tracker.page.click(".promo3")

    promo = events(tracker.page.window["dataLayer"], "select_promotion")[0]
    assert promo["promotion_name"] == "Read more"
    assert promo["creative_name"] == ""
