import logging
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel

from config import PRIMARY_SINK, SEARCH_DEBOUNCE_MS, SINK_NAMES
from page import Page
from scheduler import VirtualScheduler
from tracker import DataLayerTracker
from transport import Response, Transport

logger = logging.getLogger(__name__)


class InteractionStep(BaseModel):
    at: int = 0
    type: Literal["click", "submit", "input", "change", "request"]
    selector: Optional[str] = None
    index: int = 0
    value: Optional[str] = None
    fields: Optional[List[Tuple[str, str]]] = None
    url: str = ""
    method: str = "POST"
    body: Optional[Union[str, Dict[str, Any], List[Tuple[str, str]]]] = None
    status: int = 200
    via: Literal["fetch", "xhr"] = "fetch"


class ScriptedBackend:
    """Answers the page's requests with the status recorded in the script."""

    def __init__(self):
        self.status = 200
        self.requests = []

    def send(self, request):
        self.requests.append(request)
        return Response(self.status)

    async def fetch(self, request):
        return self.send(request)


def _select(page, step):
    matches = page.query_all(step.selector or "")
    if len(matches) <= step.index:
        raise ValueError(f"No element #{step.index} for selector {step.selector!r}")
    return matches[step.index]


async def run_step(tracker, backend, step):
    page = tracker.page

    if step.type == "request":
        backend.status = step.status
        transport = tracker.session.transport
        if step.via == "xhr":
            xhr = transport.xhr()
            xhr.open(step.method, step.url)
            xhr.send(step.body)
        else:
            await transport.fetch(step.url, method=step.method, body=step.body)
        return

    target = _select(page, step)

    if step.type == "click":
        page.click(target)
    elif step.type == "submit":
        page.submit(target, step.fields)
    elif step.type == "input":
        page.input(target, step.value or "")
    elif step.type == "change":
        page.change(target, step.value)


async def replay_interactions(html, steps, url="", data_layer=None, debug=False):
    """
    Replays a recorded interaction script against an HTML snapshot on a
    virtual clock and returns the resulting sinks.
    """
    window = None
    if data_layer is not None:
        window = {name: [] for name in SINK_NAMES}
        window[PRIMARY_SINK] = list(data_layer)

    page = Page(html, url=url, window=window)
    scheduler = VirtualScheduler()
    backend = ScriptedBackend()
    transport = Transport(sender=backend.send, fetcher=backend.fetch)

    tracker = DataLayerTracker(page, transport=transport, scheduler=scheduler, debug=debug)
    tracker.install()

    for step in sorted(steps, key=lambda step: step.at):
        scheduler.advance_to(step.at)
        try:
            await run_step(tracker, backend, step)
        except ValueError as e:
            logger.warning(f"Skipping step at t={step.at}ms: {e}")

    scheduler.advance(SEARCH_DEBOUNCE_MS)

    return {name: sink for name, sink in page.window.items() if name in SINK_NAMES and isinstance(sink, list)}
