from threading import Thread

from textual.app import App
from textual.app import ComposeResult
from textual.widgets import DataTable
from textual.widgets import Footer
from textual.widgets import Header

from .waitable import Waitable
from .waitio import WaitIO

type LifecycleEvent = (
    Waitable.Started | Waitable.Completed | Waitable.Interrupted | Waitable.Escalated
)


class Monitor(App):
    """TUI for monitoring waitable lifecycle events."""

    TITLE = "waitio Monitor"

    def __init__(self):
        super().__init__()
        self.__waitio = WaitIO()
        self.__events = self.__waitio.subscribe()
        self.__thread = Thread(target=self.__listen, name="waitio-monitor")

    def __listen(self):
        for event in self.__events:
            if isinstance(
                event,
                Waitable.Started
                | Waitable.Completed
                | Waitable.Interrupted
                | Waitable.Escalated,
            ):
                self.call_from_thread(self.handle_waitable_event, event)

    def handle_waitable_event(self, event: LifecycleEvent):
        table = self.query_one(DataTable)
        if event.id not in table.rows:
            table.add_row(event.id, event.kind, "", "", key=event.id)

        match event:
            case Waitable.Started():
                status, error = "Started", ""
            case Waitable.Completed():
                status, error = "Done", ""
            case Waitable.Interrupted(error=None):
                status, error = "Cancelled", ""
            case Waitable.Interrupted(error=message):
                status, error = "Failed", message
            case Waitable.Escalated(error=message):
                status, error = "Escalated", message

        table.update_cell(event.id, self.__column_keys[2], status)
        table.update_cell(event.id, self.__column_keys[3], error)

    def compose(self) -> ComposeResult:
        yield Header()
        yield DataTable(cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self):
        table = self.query_one(DataTable)
        self.__column_keys = table.add_columns("ID", "Kind", "Status", "Error")
        self.__thread.start()

    def on_unmount(self) -> None:
        self.__waitio.shutdown()
        self.__thread.join()
