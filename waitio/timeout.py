from typing import Any

from .routine import NotWaitable
from .routine import as_waitable
from .scheduler import Handle
from .scheduler import Scheduler
from .waitable import State
from .waitable import Waitable


class WaitTimeout(TimeoutError):
    """A waitable did not finish before its deadline."""


class Timeout[R](Waitable[R]):
    """Race a waitable against a deadline.

    The deadline starts counting when the timeout is created. If the wrapped
    waitable finishes first, the timeout finishes with its first argument.
    Otherwise the timeout fails with ``WaitTimeout`` and cancels the
    wrapped waitable.
    """

    def __init__(
        self, value: Any, seconds: float, /, *, scheduler: Scheduler | None = None
    ):
        super().__init__()
        self.seconds = seconds
        self.__scheduler = scheduler or Scheduler.current()
        self.__wrapped: Waitable[R] | None = None
        self.__deadline: Handle | None = None
        self.__waiting = False

        if (wrapped := as_waitable(value)) is None:
            self.throw(NotWaitable(f"Cannot wait for {value!r} with a timeout."))
            return
        self.__wrapped = wrapped
        self.__deadline = self.__scheduler.call_later(seconds, self.__expire)

    @property
    def wrapped(self) -> Waitable[R] | None:
        return self.__wrapped

    def on_started(self):
        if self.__wrapped is None:
            return
        if self.__wrapped.state is State.DONE:
            self.__cancel_deadline()
            self.arguments.extend(self.__wrapped.arguments[:1])
            self.end()
        elif not self.__waiting:
            self.__waiting = True
            self.__wrapped.start(self)

    def on_interrupted(self):
        self.__cancel_deadline()
        if self.__wrapped is not None:
            self.__wrapped.withdraw(self)
            self.__wrapped.interrupt()

    def __cancel_deadline(self):
        if self.__deadline is not None:
            self.__scheduler.cancel(self.__deadline)

    def __expire(self):
        self.throw(WaitTimeout(f"Gave up waiting after {self.seconds}s."))


def timeout[R](value: Any, seconds: float, /) -> Timeout[R]:
    return Timeout(value, seconds)
