from .future import FutureWaitable as FutureWaitable
from .loop import Loop as Loop
from .routine import NotWaitable as NotWaitable
from .routine import Routine as Routine
from .routine import as_waitable as as_waitable
from .scheduler import Scheduler as Scheduler
from .signal import MultipleCompletion as MultipleCompletion
from .signal import Signal as Signal
from .timeout import Timeout as Timeout
from .timeout import WaitTimeout as WaitTimeout
from .timer import Timer as Timer
from .timer import sleep as sleep
from .waitable import State as State
from .waitable import Waitable as Waitable
from .waitio import WaitIO as WaitIO
