from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from heapq import heappop
from heapq import heappush
from itertools import count
from typing import Self


@dataclass(eq=False, kw_only=True)
class Handle:
    """A callback scheduled to run at a point on the scheduler's clock."""

    when: float
    callback: Callable[[], object]
    cancelled: bool = False


class Scheduler(ABC):
    """The timer service that waitables run on.

    All callbacks run on the thread that drives the scheduler, one at a time.
    Work from other threads enters through ``call_soon_threadsafe``.
    """

    __current = ContextVar["Scheduler | None"]("Scheduler.current", default=None)

    def __init__(self):
        self.__timers: list[tuple[float, int, Handle]] = []
        self.__sequence = count().__next__

    @classmethod
    def current(cls) -> Scheduler:
        scheduler = cls.__current.get()
        if scheduler is None:
            raise RuntimeError("No scheduler is active.")
        return scheduler

    @contextmanager
    def activate(self) -> Iterator[Self]:
        token = Scheduler.__current.set(self)
        try:
            yield self
        finally:
            Scheduler.__current.reset(token)

    @abstractmethod
    def time(self) -> float:
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def call_soon_threadsafe(self, callback: Callable[[], object], /) -> None:
        raise NotImplementedError("Subclasses must implement this method.")

    def call_later(self, delay: float, callback: Callable[[], object], /) -> Handle:
        handle = Handle(when=self.time() + max(delay, 0.0), callback=callback)
        heappush(self.__timers, (handle.when, self.__sequence(), handle))
        return handle

    def cancel(self, handle: Handle, /) -> None:
        # Safe for handles that already fired or were cancelled.
        handle.cancelled = True

    def deadline(self) -> float | None:
        """When the next live timer is due, if there is one."""
        while self.__timers and self.__timers[0][2].cancelled:
            heappop(self.__timers)
        return self.__timers[0][0] if self.__timers else None

    def fire(self) -> int:
        """Run every timer that is due, in order, and count them."""
        fired = 0
        while (deadline := self.deadline()) is not None and deadline <= self.time():
            _, _, handle = heappop(self.__timers)
            handle.cancelled = True
            fired += 1
            handle.callback()
        return fired
