import secrets
import string
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from dataclasses import field
from datetime import UTC
from datetime import datetime

import dill

from .journal import Journal

B36_ALPHABET = string.ascii_lowercase + string.digits


def random_id(length: int = 10) -> str:
    return "".join(secrets.choice(B36_ALPHABET) for _ in range(length))


@dataclass(eq=False, kw_only=True)
class Event:
    """Something that happened to a single waitable."""

    event_id: str = field(default_factory=random_id, repr=False)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(tz=UTC), repr=False
    )
    id: str
    kind: str


_journal = ContextVar[Journal | None]("waitio.journal", default=None)


@contextmanager
def recording(journal: Journal | None, /) -> Iterator[None]:
    """Publish the events of this context to the given journal."""
    token = _journal.set(journal)
    try:
        yield
    finally:
        _journal.reset(token)


def publish(event: Event, /) -> None:
    if (journal := _journal.get()) is not None:
        journal.publish(dill.dumps(event))


def decode(body: bytes, /) -> Event:
    return dill.loads(body)
