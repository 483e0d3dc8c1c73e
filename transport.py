import logging

from curl_cffi import requests
from curl_cffi.requests import AsyncSession

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class Request:
    def __init__(self, method, url, body=None, headers=None):
        self.method = (method or "GET").upper()
        self.url = url or ""
        self.body = body
        self.headers = headers or {}


class Response:
    def __init__(self, status, text="", headers=None):
        self.status = status
        self.text = text
        self.headers = headers or {}

    @property
    def ok(self):
        return 200 <= self.status < 300


def _curl_kwargs(request):
    kwargs = {"headers": request.headers, "timeout": REQUEST_TIMEOUT}
    if request.body is not None:
        kwargs["data"] = request.body
    return kwargs


def curl_send(request: Request) -> Response:
    resp = requests.request(request.method, request.url, **_curl_kwargs(request))
    return Response(resp.status_code, resp.text, dict(resp.headers))


async def curl_fetch(request: Request) -> Response:
    async with AsyncSession() as session:
        resp = await session.request(request.method, request.url, **_curl_kwargs(request))
    return Response(resp.status_code, resp.text, dict(resp.headers))


class XMLHttpRequest:
    """Event-style request object: open(), send(), then "load" listeners."""

    def __init__(self, transport):
        self._transport = transport
        self._listeners = {}
        self.request = None
        self.status = 0
        self.response_text = ""

    def open(self, method, url):
        self.request = Request(method, url)

    def add_event_listener(self, event_type, callback):
        self._listeners.setdefault(event_type, []).append(callback)

    def _fire(self, event_type):
        for callback in self._listeners.get(event_type, []):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"XMLHttpRequest {event_type} listener failed: {e}")

    def send(self, body=None):
        if self.request is None:
            raise RuntimeError("XMLHttpRequest.send() called before open()")

        self.request.body = body
        try:
            response = self._transport.sender(self.request)
        except Exception:
            self._fire("error")
            raise

        self.status = response.status
        self.response_text = response.text
        self._fire("load")
        self._transport.notify(self.request, response)


class Transport:
    """
    The page's two outbound request mechanisms. Observers registered with
    observe() see every completed request matching their predicate; the
    underlying sender runs exactly once per call regardless of how many
    observers there are.
    """

    def __init__(self, sender=None, fetcher=None):
        self.sender = sender or curl_send
        self.fetcher = fetcher or curl_fetch
        self._observers = []

    def observe(self, predicate, callback):
        observer = (predicate, callback)
        self._observers.append(observer)
        return observer

    def unobserve(self, observer):
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observer_count(self):
        return len(self._observers)

    def notify(self, request, response):
        for predicate, callback in list(self._observers):
            try:
                if predicate(request, response):
                    callback(request, response)
            except Exception as e:
                logger.error(f"Request observer failed for {request.url}: {e}")

    async def fetch(self, url, method="GET", body=None, headers=None):
        request = Request(method, url, body, headers)
        response = await self.fetcher(request)
        self.notify(request, response)
        return response

    def xhr(self):
        return XMLHttpRequest(self)
