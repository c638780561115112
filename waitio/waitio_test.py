import pytest

from .signal import Signal
from .stub.journal import StubJournal
from .timeout import WaitTimeout
from .timer import Timer
from .timer import sleep
from .waitable import Waitable
from .waitio import WaitIO


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A working directory with its own pyproject.toml."""
    monkeypatch.delenv("WAITIO_JOURNAL", raising=False)
    monkeypatch.chdir(tmp_path)
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "example"\n')
    return pyproject


def test_journal_from_pyproject(project):
    project.write_text('[tool.waitio]\njournal = "stub:"\n')

    waitio = WaitIO()

    assert isinstance(waitio.journal, StubJournal)
    waitio.shutdown()


def test_journal_from_nested_directory(project, monkeypatch):
    project.write_text('[tool.waitio]\njournal = "stub:"\n')
    nested = project.parent / "src" / "app"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    waitio = WaitIO()

    assert isinstance(waitio.journal, StubJournal)
    waitio.shutdown()


def test_environment_overrides_pyproject(project, monkeypatch):
    project.write_text('[tool.waitio]\njournal = "redis://localhost"\n')
    monkeypatch.setenv("WAITIO_JOURNAL", "stub:")

    waitio = WaitIO()

    assert isinstance(waitio.journal, StubJournal)
    waitio.shutdown()


def test_invalid_journal_uri(project):
    project.write_text('[tool.waitio]\njournal = "redis://localhost"\n')

    with pytest.raises(ValueError, match="URI scheme must be"):
        WaitIO()


def test_no_journal_configured(project):
    waitio = WaitIO()

    assert waitio.journal is None
    with pytest.raises(ValueError, match="No journal URI configured"):
        waitio.subscribe()

    def body():
        yield sleep(0)
        return "still runs"

    assert waitio.run(body()) == "still runs"
    waitio.shutdown()


@pytest.mark.timeout(2)
def test_events_are_published_in_transition_order():
    waitio = WaitIO(journal=StubJournal())
    events = waitio.subscribe()

    def body():
        yield Timer(0)
        return "done"

    assert waitio.run(body()) == "done"
    waitio.shutdown()

    assert [(type(event), event.kind) for event in events] == [
        (Waitable.Started, "Routine"),
        (Waitable.Started, "Timer"),
        (Waitable.Completed, "Timer"),
        (Waitable.Completed, "Routine"),
    ]


@pytest.mark.timeout(2)
def test_failures_are_published():
    waitio = WaitIO(journal=StubJournal())
    events = waitio.subscribe()

    def body():
        yield sleep(0)
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        waitio.run(body())
    waitio.shutdown()

    failures = [
        event
        for event in events
        if isinstance(event, Waitable.Interrupted | Waitable.Escalated)
    ]
    assert [type(event) for event in failures] == [
        Waitable.Interrupted,
        Waitable.Escalated,
    ]
    assert all(event.error == "ValueError('boom')" for event in failures)


@pytest.mark.timeout(2)
def test_cancellations_are_published_without_an_error():
    waitio = WaitIO(journal=StubJournal())
    events = waitio.subscribe()

    with waitio.activate():
        signal = Signal()
        signal.waitable.interrupt()
    waitio.shutdown()

    [event] = list(events)
    assert isinstance(event, Waitable.Interrupted)
    assert event.error is None
    assert event.id == signal.waitable.id


def test_events_outside_activation_are_not_published():
    journal = StubJournal()
    waitio = WaitIO(journal=journal)
    events = waitio.subscribe()

    Signal()("unseen")
    waitio.shutdown()

    assert list(events) == []


@pytest.mark.timeout(2)
def test_run_with_a_timeout():
    waitio = WaitIO(journal=StubJournal())

    def body():
        yield sleep(1)

    with pytest.raises(WaitTimeout):
        waitio.run(body(), timeout=0.02)
    waitio.shutdown()


@pytest.mark.timeout(2)
def test_run_within_the_timeout():
    waitio = WaitIO(journal=StubJournal())

    def body():
        yield sleep(0)
        return "in time"

    assert waitio.run(body(), timeout=1) == "in time"
    waitio.shutdown()
