import logging
import time
from datetime import datetime, timezone

import orjson
from curl_cffi import requests

from config import (
    FORWARDER_ENDPOINT,
    FORWARDER_TIMEOUT,
    FORWARDER_URL,
    FORWARDER_VERIFY_SSL,
    FORWARDER_WRITE_KEY,
)

logger = logging.getLogger(__name__)

DEFAULT_CONSENT = {
    "necessary": True,
    "analytics": False,
    "marketing": False,
    "personalization": False,
}


def post_event(url, write_key, payload, timeout=FORWARDER_TIMEOUT, verify=FORWARDER_VERIFY_SSL):
    endpoint = url.rstrip("/") + FORWARDER_ENDPOINT
    start_time = time.time()

    try:
        resp = requests.post(
            endpoint,
            data=orjson.dumps(payload),
            headers={"X-Write-Key": write_key, "Content-Type": "application/json"},
            timeout=timeout,
            verify=verify,
        )
    except Exception as e:
        logger.error(f"Failed to send {payload['event']} to {endpoint}: {e}")
        return None

    duration = round((time.time() - start_time) * 1000, 2)
    logger.debug(f"Sent {payload['event']} in {duration}ms with status {resp.status_code}")

    if resp.status_code >= 400:
        logger.error(f"Forwarder endpoint returned {resp.status_code} for {payload['event']}: {resp.text[:200]}")

    return resp.status_code


class ServerForwarder:
    """
    Hands each event's properties to the server-side relay. Delivery is the
    relay's business: failures are logged here and never reach the page.
    """

    def __init__(self, session_id, user=None, consent=None, url=FORWARDER_URL, write_key=FORWARDER_WRITE_KEY, send=None):
        self.session_id = session_id
        self.user = user
        self.consent = dict(DEFAULT_CONSENT, **(consent or {}))
        self.url = url
        self.write_key = write_key
        self.send = send

    @property
    def enabled(self):
        if not self.consent.get("analytics"):
            return False
        return self.send is not None or bool(self.url and self.write_key)

    def build_payload(self, event_name, properties):
        payload = {
            "event": event_name,
            "properties": properties,
            "anonymousId": self.session_id,
            "context": {"consent": self.consent},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if self.user:
            payload["userId"] = self.user.get("id", "")
            payload["traits"] = {key: value for key, value in self.user.items() if key != "id"}

        return payload

    def track(self, event_name, properties):
        if not self.enabled:
            return None

        payload = self.build_payload(event_name, properties)

        if self.send is not None:
            try:
                return self.send(payload)
            except Exception as e:
                logger.error(f"Failed to hand off {event_name}: {e}")
                return None

        return post_event(self.url, self.write_key, payload)
