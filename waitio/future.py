from concurrent.futures import Future
from functools import partial

from .scheduler import Scheduler
from .waitable import State
from .waitable import Waitable


class FutureWaitable[R](Waitable[R]):
    """Wait for a ``concurrent.futures.Future`` to settle.

    The future may settle on any thread; the settlement is handed to the
    scheduler so that the waitable only ever changes on the scheduler's
    thread. Interrupting the waitable leaves the future alone.
    """

    def __init__(self, future: Future[R], /, *, scheduler: Scheduler | None = None):
        super().__init__()
        self.future = future
        self.__scheduler = scheduler
        self.__subscribed = False

    def on_started(self):
        if self.__subscribed:
            return
        self.__subscribed = True
        scheduler = self.__scheduler or Scheduler.current()
        self.future.add_done_callback(
            lambda future: scheduler.call_soon_threadsafe(partial(self.__settle, future))
        )

    def __settle(self, future: Future[R]):
        if self.state is not State.PENDING:
            return
        if future.cancelled():
            self.interrupt()
        elif (exception := future.exception()) is not None:
            self.throw(exception)
        else:
            self.arguments.append(future.result())
            self.end()
