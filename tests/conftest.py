import pytest

from page import Page
from scheduler import VirtualScheduler
from tracker import DataLayerTracker
from transport import Response, Transport


class FakeBackend:
    def __init__(self, status=200):
        self.status = status
        self.requests = []

    def send(self, request):
        self.requests.append(request)
        return Response(self.status)

    async def fetch(self, request):
        return self.send(request)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def make_tracker(backend):
    def _make(html, url="https://shop.test/", data_layer=None, forwarders=None):
        window = None
        if data_layer is not None:
            window = {"dataLayer": list(data_layer), "_mtm": []}
        page = Page(html, url=url, window=window)
        tracker = DataLayerTracker(
            page,
            transport=Transport(sender=backend.send, fetcher=backend.fetch),
            scheduler=VirtualScheduler(),
            forwarders=forwarders,
            debug=False,
        )
        tracker.install()
        return tracker

    return _make


def events(sink, name=None):
    return [entry for entry in sink if entry.get("event") and (name is None or entry["event"] == name)]
