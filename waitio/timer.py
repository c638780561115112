from .scheduler import Handle
from .scheduler import Scheduler
from .waitable import Waitable


class Timer(Waitable[None]):
    """Finish after a fixed number of seconds on the scheduler's clock."""

    def __init__(self, seconds: float, /, *, scheduler: Scheduler | None = None):
        super().__init__()
        self.seconds = seconds
        self.__scheduler = scheduler or Scheduler.current()
        self.__handle: Handle | None = None

    def on_started(self):
        if self.__handle is None:
            self.__handle = self.__scheduler.call_later(self.seconds, self.end)

    def on_interrupted(self):
        if self.__handle is not None:
            self.__scheduler.cancel(self.__handle)


def sleep(seconds: float, /) -> Timer:
    return Timer(seconds)
