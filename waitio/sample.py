from concurrent.futures import ThreadPoolExecutor
from functools import partial
from time import sleep as time_sleep

from .scheduler import Scheduler
from .signal import Signal
from .timeout import WaitTimeout
from .timeout import timeout
from .timer import sleep


def countdown(start: int, interval: float = 0.01):
    for i in range(start, 0, -1):
        print(f"{i}...")
        yield sleep(interval)
    return "liftoff"


async def greeting():
    signal = Signal[str]()
    Scheduler.current().call_later(0.01, partial(signal, "hello"))
    word = await signal
    return f"{word}, world"


def patient():
    try:
        yield timeout(sleep(10), 0.02)
    except WaitTimeout:
        return "gave up"
    return "waited"


def blocking(seconds: float):
    time_sleep(seconds)  # Regular blocking call
    return seconds


def main():
    launch = yield countdown(3)
    message = yield greeting()
    verdict = yield patient()
    with ThreadPoolExecutor(max_workers=1) as executor:
        slept = yield executor.submit(blocking, 0.01)
    return f"{launch}; {message}; {verdict}; slept {slept}s"
