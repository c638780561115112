import pytest
from pika import ConnectionParameters
from pika.exceptions import AMQPConnectionError

from waitio.journal_test import BaseJournalTest

from .journal import PikaJournal


def connect(factory):
    try:
        return factory()
    except AMQPConnectionError:
        pytest.skip("No AMQP broker is reachable.")


class TestPikaJournal(BaseJournalTest):
    @pytest.fixture
    def journal(self):
        journal = connect(lambda: PikaJournal(ConnectionParameters()))
        yield journal
        journal.shutdown()

    def test_pika_journal_from_uri(self):
        """Test PikaJournal.from_uri creates journal successfully."""
        journal = connect(lambda: PikaJournal.from_uri("pika://localhost:5672"))
        assert isinstance(journal, PikaJournal)
        journal.shutdown()
