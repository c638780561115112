from __future__ import annotations

from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Generator
from concurrent.futures import CancelledError
from concurrent.futures import InvalidStateError
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from functools import partial
from threading import local
from typing import Any
from typing import Self
from typing import cast

from .event import Event
from .event import publish
from .event import random_id


class State(Enum):
    PENDING = "pending"
    DONE = "done"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True)
class Done:
    """The waitable finished normally."""


@dataclass(frozen=True)
class Cancelled:
    """The waitable was interrupted without an error."""


@dataclass(frozen=True)
class Failed:
    """The waitable was interrupted with an error."""

    error: BaseException


type Outcome = Done | Cancelled | Failed


class _Trampoline(local):
    def __init__(self):
        self.work = deque[Callable[[], object]]()
        self.running = False


_trampoline = _Trampoline()


def resume(*work: Callable[[], object]) -> None:
    """Run resumption work on this thread's trampoline.

    When nothing is being resumed yet, the work runs immediately, along with
    all the work it enqueues, before this returns. Otherwise it is enqueued
    behind the work already waiting, so that long chains of callers unwind
    in a loop instead of on the call stack.
    """
    _trampoline.work.extend(work)
    if _trampoline.running:
        return

    _trampoline.running = True
    errors: list[Exception] = []
    try:
        while _trampoline.work:
            step = _trampoline.work.popleft()
            try:
                step()
            except Exception as error:
                errors.append(error)
    finally:
        _trampoline.running = False
        _trampoline.work.clear()

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup("Several waitables failed without a caller.", errors)


class Waitable[R](Awaitable[R]):
    """The base unit of suspension.

    A waitable starts out pending and moves exactly once to done or
    interrupted. Callers that start it while it is pending are queued and
    resumed, in order, when it finishes. Interruption carries an optional
    error; an error that reaches a waitable nobody is waiting on escalates
    through ``on_thrown``.
    """

    def __init__(self):
        self.id = random_id()
        self.arguments: list[Any] = []
        self.__outcome: Outcome | None = None
        self.__callers: list[Waitable[Any]] = []
        self.__started = False

    def __repr__(self):
        return f"<{type(self).__name__} {self.id!r} {self.state.value}>"

    @property
    def outcome(self) -> Outcome | None:
        return self.__outcome

    @property
    def state(self) -> State:
        match self.__outcome:
            case None:
                return State.PENDING
            case Done():
                return State.DONE
            case _:
                return State.INTERRUPTED

    @property
    def error(self) -> BaseException | None:
        match self.__outcome:
            case Failed(error=error):
                return error
            case _:
                return None

    @property
    def callers(self) -> tuple[Waitable[Any], ...]:
        return tuple(self.__callers)

    def result(self) -> R:
        """Get the first argument of a finished waitable."""
        match self.__outcome:
            case None:
                raise InvalidStateError(f"{self!r} is still pending.")
            case Done():
                return cast(R, self.arguments[0] if self.arguments else None)
            case Failed(error=error):
                raise error
            case Cancelled():
                raise CancelledError()

    def __await__(self) -> Generator[Self, Any, R]:
        return (yield self)

    def start(self, caller: Waitable[Any] | None = None, /) -> Self:
        """Begin or observe this waitable, optionally suspending a caller on it."""
        resume(partial(self.__start, caller))
        return self

    def __start(self, caller: Waitable[Any] | None) -> None:
        match self.__outcome:
            case None:
                if caller is not None:
                    self.__callers.append(caller)
                if not self.__started:
                    self.__started = True
                    publish(self.Started(id=self.id, kind=type(self).__name__))
                try:
                    self.on_started()
                except Exception as error:
                    if self.__outcome is not None:
                        # Escalated from a transition the hook already made.
                        raise
                    self.throw(error)
            case Done() if caller is not None:
                resume(caller.start)
            case Failed(error=error) if caller is not None:
                resume(partial(caller.interrupt, error))
            case Cancelled() if caller is not None:
                resume(caller.interrupt)

    def end(self) -> None:
        """Finish normally and resume every caller."""
        if self.__outcome is not None:
            return
        self.__outcome = Done()
        callers, self.__callers = self.__callers, []
        publish(self.Completed(id=self.id, kind=type(self).__name__))
        resume(*(caller.start for caller in callers))

    def interrupt(self, error: BaseException | None = None, /) -> None:
        """Cancel this waitable, or fail it when an error is given."""
        if self.__outcome is not None:
            return
        self.__outcome = Cancelled() if error is None else Failed(error)
        callers, self.__callers = self.__callers, []
        publish(
            self.Interrupted(
                id=self.id,
                kind=type(self).__name__,
                error=None if error is None else repr(error),
            )
        )
        self.on_interrupted()
        resume(*(partial(caller.interrupt, error) for caller in callers))
        if not callers and error is not None:
            publish(
                self.Escalated(id=self.id, kind=type(self).__name__, error=repr(error))
            )
            self.on_thrown(error)

    def throw(self, error: BaseException, /) -> None:
        self.interrupt(error)

    def withdraw(self, caller: Waitable[Any], /) -> None:
        """Stop resuming a caller that no longer waits on this waitable."""
        with suppress(ValueError):
            self.__callers.remove(caller)

    def on_started(self) -> None:
        """Begin the underlying work. Runs on every start while pending."""

    def on_interrupted(self) -> None:
        """Release the underlying resources."""

    def on_thrown(self, error: BaseException, /) -> None:
        """Handle an error that no caller is waiting to receive."""
        raise error

    @dataclass(eq=False, kw_only=True)
    class Started(Event): ...

    @dataclass(eq=False, kw_only=True)
    class Completed(Event): ...

    @dataclass(eq=False, kw_only=True)
    class Interrupted(Event):
        error: str | None

    @dataclass(eq=False, kw_only=True)
    class Escalated(Event):
        error: str
