from collections.abc import Callable
from queue import Empty
from queue import SimpleQueue
from time import monotonic
from typing import Any

from .routine import NotWaitable
from .routine import as_waitable
from .scheduler import Scheduler
from .waitable import State


class Loop(Scheduler):
    """Run waitables on the calling thread.

    The loop sleeps until the next timer is due or until another thread
    hands it a callback, and runs them one at a time.
    """

    def __init__(self):
        super().__init__()
        self.__ready = SimpleQueue[Callable[[], object]]()

    def time(self) -> float:
        return monotonic()

    def call_soon_threadsafe(self, callback: Callable[[], object], /):
        self.__ready.put(callback)

    def run_once(self):
        """Wait for the next event, then run everything that is ready."""
        deadline = self.deadline()
        timeout = None if deadline is None else max(deadline - self.time(), 0.0)
        try:
            callback = self.__ready.get(timeout=timeout)
        except Empty:
            pass
        else:
            callback()
        self.fire()

    def run(self, value: Any, /) -> Any:
        """Wait for a value until it finishes, and return its result.

        An error that escapes the waitable is raised from here.
        """
        if (waitable := as_waitable(value)) is None:
            raise NotWaitable(f"Cannot run {value!r}.")
        with self.activate():
            waitable.start()
            while waitable.state is State.PENDING:
                self.run_once()
        return waitable.result()
