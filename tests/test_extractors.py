from extractors import (
    context_from_payload,
    extract_product_context,
    extract_sku_from_href,
    extract_sku_from_label,
    from_container_attributes,
    from_product_info_attribute,
    from_structural_scrape,
)
from page import Page


def test_product_info_attribute_wins_over_container_attributes():
    page = Page(
        """
        <div class="product-box" data-product-id="uuid-1"
             data-product-info='{"item_id": "SW1000", "item_name": "Widget", "price": 9.5, "item_brand": "Acme"}'>
            <span class="product-name">Scraped name</span>
            <button class="btn-buy">Buy</button>
        </div>
        """
    )
    context = extract_product_context(page, page.query(".btn-buy"))

    assert context.item_id == "SW1000"
    assert context.item_name == "Widget"
    assert context.get_price() == 9.5
    assert context.to_item()["item_brand"] == "Acme"


def test_product_info_found_inside_nearest_container():
    page = Page(
        """
        <div class="product-detail">
            <div class="wsc-product-data-container" data-product-info='{"item_id": "SW2", "item_name": "Lamp"}'></div>
            <button class="btn-buy">Buy</button>
        </div>
        """
    )
    context = from_product_info_attribute(page, page.query(".btn-buy"))

    assert context.item_id == "SW2"
    assert context.item_name == "Lamp"


def test_malformed_product_info_falls_through_to_container():
    page = Page(
        """
        <div class="product-box" data-product-number="SW77" data-product-info="{not json">
            <span class="product-name">Chair</span>
            <button class="btn-buy">Buy</button>
        </div>
        """
    )
    context = extract_product_context(page, page.query(".btn-buy"))

    assert context.item_id == "SW77"
    assert context.item_name == "Chair"


def test_container_prefers_product_id_over_number():
    page = Page('<div class="product-box" data-product-id="uuid-9" data-product-number="SW9"><a>x</a></div>')

    assert from_container_attributes(page, page.query("a")).item_id == "uuid-9"


def test_identity_without_name_element_keeps_name_empty():
    page = Page('<div class="product-box" data-product-id="SW3000"><button class="btn-buy">Add to cart</button></div>')
    context = extract_product_context(page, page.query(".btn-buy"))

    assert context.item_id == "SW3000"
    assert context.item_name == ""


def test_structural_scrape_reads_labelled_product_number():
    page = Page(
        """
        <div class="line-item">
            <span class="line-item-label">Desk</span>
            <div class="line-item-ordernumber">Product number: SW10001.2</div>
        </div>
        """
    )
    context = extract_product_context(page, page.query(".line-item-label"))

    assert context.item_id == "SW10001.2"
    assert context.item_name == "Desk"


def test_structural_scrape_falls_back_to_product_link():
    page = Page('<div class="product-box"><a class="product-image-link" href="https://shop.test/desk/SW-555/">img</a></div>')

    assert from_structural_scrape(page, page.query("a")).item_id == "SW-555"


def test_sku_helpers():
    assert extract_sku_from_label("Artikelnummer: AB-12.3") == "AB-12.3"
    assert extract_sku_from_label("no label here") == ""
    assert extract_sku_from_href("/some-product/SW123") == "SW123"
    assert extract_sku_from_href("/some-product/lower-case") == ""
    assert extract_sku_from_href("") == ""


def test_no_container_gives_empty_identity_and_trigger_text():
    page = Page('<ul><li><a href="/x">  Loose   link </a></li></ul>')
    context = extract_product_context(page, page.query("a"))

    assert context.item_id == ""
    assert context.item_name == "Loose link"


def test_no_container_without_trigger_text_is_empty():
    page = Page('<div><button class="wishlist-add">Save</button></div>')
    context = extract_product_context(page, page.query("button"), allow_trigger_text=False)

    assert context.is_empty()


def test_price_scraped_when_payload_has_none():
    page = Page(
        """
        <div class="product-box" data-product-id="SW1">
            <span class="product-name">Kettle</span>
            <span class="product-price">€ 24.90*</span>
            <button class="btn-buy">Buy</button>
        </div>
        """
    )
    context = extract_product_context(page, page.query(".btn-buy"))

    assert context.get_price() == 24.9


def test_payload_without_identity_is_ignored():
    assert context_from_payload({"price": 3}) is None
    assert context_from_payload(["SW1"]) is None
    assert context_from_payload({"item_id": 123, "item_name": " Cup "}).item_id == "123"


def test_name_and_price_found_in_enclosing_container():
    page = Page(
        """
        <div class="product-box">
            <span class="product-name">Pan</span>
            <span class="product-price">24,90 €</span>
            <button class="btn-buy" data-product-id="uuid-1">Buy</button>
        </div>
        """
    )
    context = extract_product_context(page, page.query(".btn-buy"), allow_trigger_text=False)

    assert context.item_id == "uuid-1"
    assert context.item_name == "Pan"
    assert context.get_price() == 24.9
