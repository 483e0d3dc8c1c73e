import asyncio
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


class LoopScheduler:
    """
    Timers on an asyncio loop. Delays are in milliseconds.

    Without an explicit loop, call_later must run inside a running loop.
    Pass the loop when interactions are dispatched from synchronous code;
    the timers then fire once that loop runs.
    """

    def __init__(self, loop=None):
        self.loop = loop

    def call_later(self, delay_ms, callback):
        loop = self.loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)


class VirtualTimer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class VirtualScheduler:
    """
    A manually advanced clock, used to replay recorded interactions with
    their original timing.
    """

    def __init__(self):
        self.now = 0
        self._queue = []
        self._counter = itertools.count()

    def call_later(self, delay_ms, callback):
        timer = VirtualTimer(self.now + delay_ms, callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    def advance_to(self, when):
        while self._queue and self._queue[0][0] <= when:
            due, _, timer = heapq.heappop(self._queue)
            self.now = due
            if timer.cancelled:
                continue
            try:
                timer.callback()
            except Exception as e:
                logger.error(f"Timer callback failed at t={due}ms: {e}")
        self.now = max(self.now, when)

    def advance(self, delay_ms):
        self.advance_to(self.now + delay_ms)

    def pending(self):
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)
