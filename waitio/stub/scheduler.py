from collections import deque
from collections.abc import Callable
from threading import Lock

from waitio.scheduler import Scheduler


class StubScheduler(Scheduler):
    """A scheduler whose clock only moves when told to."""

    def __init__(self, *, now: float = 0.0):
        super().__init__()
        self.__now = now
        self.__lock = Lock()
        self.__ready = deque[Callable[[], object]]()

    def time(self) -> float:
        return self.__now

    def call_soon_threadsafe(self, callback: Callable[[], object], /):
        with self.__lock:
            self.__ready.append(callback)

    def run_ready(self) -> int:
        """Run the callbacks handed over so far, and count them."""
        ran = 0
        while True:
            with self.__lock:
                if not self.__ready:
                    return ran
                callback = self.__ready.popleft()
            ran += 1
            callback()

    def advance(self, seconds: float = 0.0, /):
        """Move the clock forward, firing the timers that fall due on the way."""
        target = self.__now + seconds
        self.run_ready()
        while (deadline := self.deadline()) is not None and deadline <= target:
            self.__now = max(self.__now, deadline)
            self.fire()
            self.run_ready()
        self.__now = target
