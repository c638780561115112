import pytest

from .routine import NotWaitable
from .routine import Routine
from .signal import Signal
from .timeout import Timeout
from .timeout import WaitTimeout
from .timeout import timeout
from .timer import Timer
from .waitable import Cancelled
from .waitable import State
from .waitable import Waitable
from .waitable_test import Recorder


def test_deadline_before_the_wrapped_timer_fails_the_timeout(scheduler):
    timer = Timer(5)
    combinator = Timeout(timer, 1)
    caller = Recorder("caller")
    combinator.start(caller)

    scheduler.advance(1)

    assert isinstance(combinator.error, WaitTimeout)
    assert isinstance(caller.error, WaitTimeout)
    assert timer.outcome == Cancelled()
    assert scheduler.deadline() is None


def test_wrapped_waitable_finishing_first_wins(scheduler):
    signal = Signal()
    combinator = Timeout(signal, 1)
    caller = Recorder("caller")
    combinator.start(caller)

    scheduler.advance(0.5)
    signal("in time")

    assert combinator.result() == "in time"
    assert caller.log == ["caller started"]
    assert scheduler.deadline() is None

    scheduler.advance(5)
    assert combinator.state is State.DONE
    assert caller.error is None


def test_wrapped_waitable_already_finished_at_start(scheduler):
    done = Waitable()
    done.arguments.extend(["first", "second"])
    done.end()

    combinator = Timeout(done, 1).start()

    assert combinator.arguments == ["first"]
    assert combinator.result() == "first"
    assert scheduler.deadline() is None


def test_wrapped_waitable_failing_fails_the_timeout(scheduler):
    failing = Waitable()
    combinator = Timeout(failing, 1)
    caller = Recorder("caller")
    combinator.start(caller)
    error = ValueError("boom")

    failing.throw(error)

    assert combinator.error is error
    assert caller.error is error
    assert scheduler.deadline() is None


def test_non_waitable_value_fails_construction(scheduler):
    with pytest.raises(NotWaitable):
        Timeout(42, 1)
    assert scheduler.deadline() is None


def test_unobserved_timeout_escalates(scheduler):
    Timeout(Timer(5), 1).start()

    with pytest.raises(WaitTimeout):
        scheduler.advance(1)


def test_deadline_counts_from_construction(scheduler):
    combinator = Timeout(Timer(5), 1)
    combinator.start(Recorder("caller"))
    scheduler.advance(0.5)

    scheduler.advance(0.5)

    assert isinstance(combinator.error, WaitTimeout)


def test_interrupting_the_timeout_cancels_the_deadline_and_the_wrapped(scheduler):
    timer = Timer(5)
    combinator = Timeout(timer, 1).start()

    combinator.interrupt()

    assert combinator.outcome == Cancelled()
    assert timer.outcome == Cancelled()
    assert scheduler.deadline() is None


def test_routine_can_recover_from_a_timeout(scheduler):
    def body():
        try:
            yield timeout(Timer(5), 1)
        except WaitTimeout:
            return "gave up"
        return "waited"

    routine = Routine(body()).start()
    scheduler.advance(1)

    assert routine.result() == "gave up"


def test_timeout_wrapping_a_routine(scheduler):
    def slow():
        yield Timer(0.5)
        return "finished"

    combinator = Timeout(slow(), 1)
    combinator.start(Recorder("caller"))
    assert isinstance(combinator.wrapped, Routine)

    scheduler.advance(0.5)

    assert combinator.result() == "finished"
