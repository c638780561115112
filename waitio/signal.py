from collections.abc import Generator
from typing import Any
from typing import Self

from .waitable import Cancelled
from .waitable import Waitable


class MultipleCompletion(RuntimeError):
    """A signal was called after it had already finished."""


class Signal[R = Any]:
    """A one-shot callable that finishes its waitable when called.

    Hand the signal to code that reports back through a callback, and wait
    on the signal itself. The first call supplies the result: nothing for
    ``None``, a single argument as itself, several arguments as a tuple.
    Calling a signal again is an error, escalated to whoever made the call.
    Calls on a signal that was cancelled are ignored.
    """

    def __init__(self):
        self.waitable = Waitable[R]()

    def __repr__(self):
        return f"<{type(self).__name__} {self.waitable.id!r}>"

    def __await__(self) -> Generator[Waitable[R], Any, R]:
        return self.waitable.__await__()

    def __call__(self, *args: Any) -> Self:
        match self.waitable.outcome:
            case None:
                self.waitable.arguments.append(
                    None if not args else args[0] if len(args) == 1 else args
                )
                self.waitable.end()
            case Cancelled():
                pass
            case _:
                self.waitable.on_thrown(
                    MultipleCompletion(f"{self!r} can only be called once.")
                )
        return self
