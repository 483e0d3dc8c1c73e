import copy
import logging

from config import BLOCK_TITLE, DEFAULT_CURRENCY, LISTING_BLOCK, PRIMARY_SINK, SINK_NAMES

logger = logging.getLogger(__name__)

RESET_MARKER = {"ecommerce": None}


def calculate_value(price, quantity):
    if not price:
        return 0
    try:
        return round(float(price) * float(quantity), 2)
    except (TypeError, ValueError):
        return 0


def resolve_block_title(page, element, block_selector):
    block = page.closest(element, block_selector)
    if block is None:
        return ""
    return page.text(page.find(block, BLOCK_TITLE))


def resolve_list_name(page, element, fallback):
    return resolve_block_title(page, element, LISTING_BLOCK) or fallback


def has_identity(item):
    return bool(item.get("item_id")) or bool(item.get("item_name"))


class EventNormalizer:
    def __init__(self, session):
        self.session = session

    def live_sinks(self):
        window = self.session.page.window
        for name in SINK_NAMES:
            sink = window.get(name)
            if isinstance(sink, list):
                yield name, sink
            else:
                logger.debug(f"Sink {name} is not a list, skipping")

    def resolve_currency(self):
        sink = self.session.page.window.get(PRIMARY_SINK)
        if not isinstance(sink, list):
            return DEFAULT_CURRENCY

        for entry in reversed(sink):
            if not isinstance(entry, dict):
                continue
            ecommerce = entry.get("ecommerce")
            if isinstance(ecommerce, dict) and ecommerce.get("currency"):
                return ecommerce["currency"]

        return DEFAULT_CURRENCY

    def build_item_event(self, event_name, context, quantity=1):
        item = context.to_item()
        item["quantity"] = quantity

        return self.push_event(
            event_name,
            {
                "currency": context.get_currency() or self.resolve_currency(),
                "value": calculate_value(context.get_price(), quantity),
                "items": [item],
            },
        )

    def push_event(self, event_name, ecommerce=None, require_items=True, **fields):
        """
        Builds the canonical event and appends it to every live sink,
        preceded by a reset marker when it carries ecommerce data. Returns
        the event, or None when it was suppressed.
        """
        event = {"event": event_name}

        if ecommerce is not None:
            ecommerce = dict(ecommerce)
            if "items" in ecommerce:
                items = [item for item in ecommerce["items"] or [] if has_identity(item)]
                if require_items and not items:
                    logger.debug(f"Suppressed {event_name}: no item with id or name")
                    return None
                ecommerce["items"] = items
            event["ecommerce"] = ecommerce

        for key, value in fields.items():
            if value is not None:
                event[key] = value

        for name, sink in self.live_sinks():
            if "ecommerce" in event:
                sink.append(dict(RESET_MARKER))
            sink.append(copy.deepcopy(event))

        logger.debug(f"Pushed {event_name}: {event}")

        properties = {key: value for key, value in event.items() if key != "event"}
        for forwarder in self.session.forwarders:
            try:
                forwarder.track(event_name, copy.deepcopy(properties))
            except Exception as e:
                logger.error(f"Forwarder failed for {event_name}: {e}")

        return event
