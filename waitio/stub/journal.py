from collections.abc import Iterator
from queue import Queue
from queue import ShutDown
from threading import Lock

from waitio.journal import Journal


class StubJournal(Journal):
    """An in-memory journal for tests and single-process use.

    Messages published before the first subscriber are buffered, and every
    subscriber gets its own queue from then on.
    """

    def __init__(self):
        self.__lock = Lock()
        self.__backlog: list[bytes] = []
        self.__subscribers: list[Queue[bytes]] = []
        self.__shutdown = False

    @classmethod
    def from_uri(cls, uri: str, /):
        return cls()

    def subscribe(self) -> Iterator[bytes]:
        with self.__lock:
            queue = Queue[bytes]()
            for message in self.__backlog:
                queue.put(message)
            self.__backlog.clear()
            if self.__shutdown:
                queue.shutdown()
            else:
                self.__subscribers.append(queue)
        return self.__drain(queue)

    def __drain(self, queue: Queue[bytes]) -> Iterator[bytes]:
        while True:
            try:
                yield queue.get()
            except ShutDown:
                return

    def publish(self, message: bytes, /):
        with self.__lock:
            if self.__shutdown:
                return
            if not self.__subscribers:
                self.__backlog.append(message)
            for queue in self.__subscribers:
                queue.put(message)

    def shutdown(self):
        with self.__lock:
            if self.__shutdown:
                return
            self.__shutdown = True
            for queue in self.__subscribers:
                queue.shutdown()
