import importlib
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated
from typing import Any
from typing import Self

from typer import Argument
from typer import BadParameter
from typer import Option
from typer import Typer

from .monitor import Monitor
from .waitio import WaitIO

app = Typer()


@dataclass
class Target:
    """A function named as MODULE:FUNCTION."""

    module: str
    name: str

    @classmethod
    def parse(cls, value: str) -> Self:
        module, _, name = value.partition(":")
        if not module.strip() or not name.strip():
            raise BadParameter(f"Expected MODULE:FUNCTION, got: '{value}'")
        return cls(module=module.strip(), name=name.strip())

    def load(self) -> Callable[[], Any]:
        return getattr(importlib.import_module(self.module), self.name)


@app.command()
def run(
    target: Annotated[
        Target,
        Argument(
            parser=Target.parse,
            help="The function producing the routine to run. "
            "Example: 'waitio.sample:main'",
            metavar="MODULE:FUNCTION",
        ),
    ],
    timeout: Annotated[
        float | None,
        Option(help="Give up after this many seconds."),
    ] = None,
):
    """Run a routine to completion and print its result.

    The function is called without arguments, and whatever it returns
    (a generator, a coroutine, or any other waitable) is run on a fresh loop.
    """
    function = target.load()
    waitio = WaitIO()
    try:
        with waitio.activate():
            value = function()
        print(waitio.run(value, timeout=timeout))
    finally:
        waitio.shutdown()


@app.command()
def monitor(raw: bool = False):
    """Monitor waitable events.

    Shows a live view of waitable activity. Use --raw for detailed event output.
    """
    if raw:
        waitio = WaitIO()
        try:
            for event in waitio.subscribe():
                print(event)
        except KeyboardInterrupt:
            print("Shutting down gracefully.")
        finally:
            waitio.shutdown()
    else:
        Monitor().run()


if __name__ == "__main__":
    app()
