import os
import tomllib
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .event import Event
from .event import decode
from .event import recording
from .journal import Journal
from .journal import journal_from_uri
from .loop import Loop
from .timeout import Timeout


class WaitIO:
    """Run waitables on a loop, publishing their events to a journal.

    Without an explicit journal, the journal URI is read from the
    ``WAITIO_JOURNAL`` environment variable, or else from ``journal`` under
    ``[tool.waitio]`` in the nearest ``pyproject.toml``. When neither is set,
    events are not published.
    """

    def __init__(self, *, journal: Journal | None = None, loop: Loop | None = None):
        self.__journal = journal or self.__default_journal()
        self.__loop = loop or Loop()

    def __pyproject(self) -> Path | None:
        for path in [cwd := Path.cwd(), *cwd.parents]:
            candidate = path / "pyproject.toml"
            if candidate.is_file():
                return candidate
        return None

    def __config(self) -> dict:
        if pyproject := self.__pyproject():
            with pyproject.open("rb") as f:
                config = tomllib.load(f)
            return config.get("tool", {}).get("waitio", {})
        return {}

    def __default_journal(self) -> Journal | None:
        journal_uri = os.environ.get("WAITIO_JOURNAL")
        if not journal_uri:
            journal_uri = self.__config().get("journal")
            if not journal_uri:
                return None
        return journal_from_uri(journal_uri)

    @property
    def journal(self) -> Journal | None:
        return self.__journal

    @property
    def loop(self) -> Loop:
        return self.__loop

    @contextmanager
    def activate(self) -> Iterator[Loop]:
        """Make the loop the active scheduler and record events."""
        with self.__loop.activate(), recording(self.__journal):
            yield self.__loop

    def run(self, value: Any, /, *, timeout: float | None = None) -> Any:
        """Run a routine or other waitable to completion and return its result."""
        with self.activate() as loop:
            if timeout is not None:
                value = Timeout(value, timeout)
            return loop.run(value)

    def subscribe(self) -> Iterator[Event]:
        """Iterate over the events published to the journal."""
        if self.__journal is None:
            raise ValueError(
                "No journal URI configured. Set WAITIO_JOURNAL env var "
                "or add 'journal' to [tool.waitio] in pyproject.toml"
            )
        return map(decode, self.__journal.subscribe())

    def shutdown(self):
        """Shut down all components."""
        if self.__journal is not None:
            self.__journal.shutdown()
