from conftest import events
from forwarder import ServerForwarder

PRODUCT = '<div class="product-box" data-product-id="SW7"><span class="product-name">Kettle</span><button class="wishlist-add">Save</button></div>'


def test_disabled_without_analytics_consent():
    sent = []
    forwarder = ServerForwarder("anon-1", send=sent.append)

    assert forwarder.enabled is False
    assert forwarder.track("add_to_wishlist", {"items": []}) is None
    assert sent == []


def test_disabled_without_destination():
    forwarder = ServerForwarder("anon-1", consent={"analytics": True}, url="", write_key="")

    assert forwarder.enabled is False


def test_payload_carries_identity_and_consent():
    forwarder = ServerForwarder(
        "anon-1",
        user={"id": "cust-9", "email": "jo@example.com", "country": "DE"},
        consent={"analytics": True},
    )
    payload = forwarder.build_payload("search", {"search_term": "lamp"})

    assert payload["event"] == "search"
    assert payload["properties"] == {"search_term": "lamp"}
    assert payload["anonymousId"] == "anon-1"
    assert payload["userId"] == "cust-9"
    assert payload["traits"] == {"email": "jo@example.com", "country": "DE"}
    assert payload["context"]["consent"]["analytics"] is True
    assert payload["context"]["consent"]["marketing"] is False
    assert "timestamp" in payload


def test_anonymous_payload_has_no_user_fields():
    payload = ServerForwarder("anon-2", consent={"analytics": True}).build_payload("search", {})

    assert "userId" not in payload
    assert "traits" not in payload


def test_emitted_events_are_forwarded(make_tracker):
    sent = []
    forwarder = ServerForwarder("anon-3", consent={"analytics": True}, send=sent.append)
    tracker = make_tracker(PRODUCT, forwarders=[forwarder])

    tracker.page.click(".wishlist-add")

    assert len(events(tracker.page.window["dataLayer"], "add_to_wishlist")) == 1
    assert len(sent) == 1
    assert sent[0]["event"] == "add_to_wishlist"
    assert sent[0]["properties"]["ecommerce"]["items"][0]["item_id"] == "SW7"


def test_failing_forwarder_does_not_block_sinks(make_tracker):
    def broken(payload):
        raise ConnectionError("relay down")

    forwarder = ServerForwarder("anon-4", consent={"analytics": True}, send=broken)
    tracker = make_tracker(PRODUCT, forwarders=[forwarder])

    tracker.page.click(".wishlist-add")

    assert len(events(tracker.page.window["dataLayer"], "add_to_wishlist")) == 1
    assert len(events(tracker.page.window["_mtm"], "add_to_wishlist")) == 1
