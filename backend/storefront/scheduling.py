import threading
from typing import Callable


class TimerScheduler:
    """Runs a callback once on a daemon timer thread."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer
