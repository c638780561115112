from collections.abc import Coroutine
from collections.abc import Generator
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from .future import FutureWaitable
from .signal import Signal
from .waitable import State
from .waitable import Waitable


class NotWaitable(TypeError):
    """The value cannot be waited on."""


@dataclass(frozen=True)
class Yielded:
    value: Any


@dataclass(frozen=True)
class Returned:
    value: Any


@dataclass(frozen=True)
class Raised:
    error: Exception


type Step = Yielded | Returned | Raised


class Resumable:
    """A generator or coroutine, advanced one step at a time.

    Each step reports what the routine did: produced a value and paused,
    returned, or raised. Once it has returned or raised it is finished
    and cannot be stepped again.
    """

    def __init__(self, routine: Generator[Any, Any, Any] | Coroutine[Any, Any, Any]):
        self.__routine = routine
        self.__finished = False

    def __repr__(self):
        return f"<{type(self).__name__} {self.__routine!r}>"

    @property
    def finished(self) -> bool:
        return self.__finished

    def advance(self, value: Any = None, /) -> Step:
        """Resume the routine, sending it a value."""
        return self.__step(self.__routine.send, value)

    def inject(self, error: BaseException, /) -> Step:
        """Resume the routine by raising an error where it paused."""
        return self.__step(self.__routine.throw, error)

    def close(self):
        self.__finished = True
        self.__routine.close()

    def __step(self, resume: Any, argument: Any) -> Step:
        if self.__finished:
            raise RuntimeError(f"{self!r} has already finished.")
        try:
            value = resume(argument)
        except StopIteration as stop:
            self.__finished = True
            return Returned(stop.value)
        except Exception as error:
            self.__finished = True
            return Raised(error)
        return Yielded(value)


def _ready() -> Waitable[None]:
    waitable = Waitable[None]()
    waitable.end()
    return waitable


def _first(waitable: Waitable[Any]) -> Any:
    return waitable.arguments[0] if waitable.arguments else None


class Routine[R](Waitable[R]):
    """Drive a generator or coroutine through the waitables it produces.

    Each value the routine yields (or awaits) is converted with
    ``as_waitable`` and the routine pauses until that callee finishes.
    The callee's first argument is sent back in as the value of the
    ``yield``. A callee that fails raises its error inside the routine,
    which may handle it and carry on. Yielding a value that is not waitable
    does not pause; the previous callee's value is sent back in again.

    The routine's return value becomes the result of the routine waitable.
    """

    def __init__(self, routine: Generator[Any, Any, R] | Coroutine[Any, Any, R], /):
        super().__init__()
        self.__resumable = Resumable(routine)
        self.__callee: Waitable[Any] = _ready()
        self.__consumed = False

    @property
    def callee(self) -> Waitable[Any]:
        return self.__callee

    def on_started(self):
        # Starting with a new caller must not step past a callee twice.
        if self.__consumed or self.__callee.state is not State.DONE:
            return
        self.__consumed = True
        self.__follow(self.__resumable.advance(_first(self.__callee)))

    def interrupt(self, error: BaseException | None = None, /):
        if (
            error is None
            or self.state is not State.PENDING
            or self.__resumable.finished
        ):
            super().interrupt(error)
            return
        # The error is raised where the routine paused, instead of the
        # routine being interrupted outright.
        self.__abandon()
        self.__consumed = True
        self.__follow(self.__resumable.inject(error))

    def on_interrupted(self):
        self.__abandon()
        if not self.__resumable.finished:
            self.__resumable.close()

    def __abandon(self):
        self.__callee.withdraw(self)
        self.__callee.interrupt()

    def __follow(self, step: Step):
        while True:
            match step:
                case Returned(value=value):
                    self.arguments.append(value)
                    self.end()
                    return
                case Raised(error=error):
                    self.throw(error)
                    return
                case Yielded(value=value):
                    callee = as_waitable(value)
                    if callee is None:
                        step = self.__resumable.advance(_first(self.__callee))
                        continue
                    self.__callee = callee
                    self.__consumed = False
                    callee.start(self)
                    return


def as_waitable(value: Any, /) -> Waitable[Any] | None:
    """Convert a value to the waitable it stands for, if it stands for one."""
    match value:
        case Waitable():
            return value
        case Signal():
            return value.waitable
        case Future():
            return FutureWaitable(value)
        case Generator() | Coroutine():
            return Routine(value)
        case _:
            return None
