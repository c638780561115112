from abc import ABC
from abc import abstractmethod
from collections.abc import Iterator


class Journal(ABC):
    """A channel that lifecycle events are published to and read back from.

    Events are published as encoded bytes. Every subscriber sees every
    message published after it subscribed, in publishing order.
    """

    @classmethod
    @abstractmethod
    def from_uri(cls, uri: str, /):
        """Create a journal instance from a URI."""
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def subscribe(self) -> Iterator[bytes]:
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def publish(self, message: bytes, /):
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def shutdown(self):
        raise NotImplementedError("Subclasses must implement this method.")


def journal_from_uri(uri: str, /) -> Journal:
    """Pick the journal implementation named by the URI scheme."""
    if uri.startswith("pika:"):
        from .pika.journal import PikaJournal

        return PikaJournal.from_uri(uri)
    if uri.startswith("stub:"):
        from .stub.journal import StubJournal

        return StubJournal.from_uri(uri)
    raise ValueError(f"URI scheme must be 'pika:' or 'stub:', got: {uri}")
