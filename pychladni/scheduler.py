"""
Background execution context.

A single daemon thread that runs posted calls and recurring timers one at a
time, in order. Anything that only ever runs on this thread needs no
locking: a call posted while a timer callback is running waits until that
callback returns.

Classes:
    ScheduledTask: Handle for a recurring timer; cancel() disarms it.
    BackgroundContext: The thread, its inbox of posted calls and its timers.
"""

import collections
import heapq
import itertools
import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ScheduledTask:
    """
    Recurring timer armed on a BackgroundContext.

    Attributes:
        period (float): Seconds between ticks.
        deadline (float): Clock time of the next tick.
    """

    def __init__(self, period: float, callback: Callable[[], None], deadline: float):
        self.period = period
        self.callback = callback
        self.deadline = deadline
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def cancel(self):
        """Disarms the timer. A tick that is already running finishes."""
        self._cancelled = True


class BackgroundContext:
    """
    Single-threaded scheduler for the field generator.

    Posted calls run before any timer that is due. A tick that comes due
    while another call is running fires late, and the next tick is armed one
    period after the late one started, so lateness accumulates.
    """

    def __init__(self, name: str = "field-generator", clock: Callable[[], float] = time.monotonic):
        self.name = name
        self._clock = clock
        self._condition = threading.Condition()
        self._inbox = collections.deque()
        self._timers = []
        self._sequence = itertools.count()
        self._thread: Optional[threading.Thread] = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self._thread is not None:
            raise RuntimeError(f"Context '{self.name}' already started")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Background context '%s' started", self.name)

    def stop(self, timeout: Optional[float] = 5.0):
        """Stops the loop after the call in progress, dropping pending work."""
        with self._condition:
            self._stopped = True
            self._condition.notify_all()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        logger.debug("Background context '%s' stopped", self.name)

    def post(self, fn: Callable, *args):
        """Queues fn(*args) to run on the background thread."""
        with self._condition:
            if self._stopped:
                raise RuntimeError(f"Context '{self.name}' is stopped")
            self._inbox.append((fn, args))
            self._condition.notify_all()

    def call_every(self, period: float, callback: Callable[[], None]) -> ScheduledTask:
        """Arms a recurring timer whose first tick is one period from now."""
        if period <= 0:
            raise ValueError(f"period must be positive, got {period!r}")
        with self._condition:
            if self._stopped:
                raise RuntimeError(f"Context '{self.name}' is stopped")
            task = ScheduledTask(period, callback, self._clock() + period)
            heapq.heappush(self._timers, (task.deadline, next(self._sequence), task))
            self._condition.notify_all()
        return task

    def _next_job(self):
        with self._condition:
            while True:
                if self._stopped:
                    return None
                if self._inbox:
                    return self._inbox.popleft()
                while self._timers and not self._timers[0][2].active:
                    heapq.heappop(self._timers)
                if not self._timers:
                    self._condition.wait()
                    continue
                wait = self._timers[0][0] - self._clock()
                if wait <= 0:
                    _, _, task = heapq.heappop(self._timers)
                    return self._fire, (task,)
                self._condition.wait(wait)

    def _fire(self, task: ScheduledTask):
        if not task.active:
            return
        started = self._clock()
        try:
            task.callback()
        finally:
            if task.active:
                task.deadline = started + task.period
                with self._condition:
                    heapq.heappush(self._timers, (task.deadline, next(self._sequence), task))

    def _run(self):
        while True:
            job = self._next_job()
            if job is None:
                return
            fn, args = job
            try:
                fn(*args)
            except Exception:
                logger.exception("Unhandled error in background context '%s'", self.name)
