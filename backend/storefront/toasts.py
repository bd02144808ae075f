import threading
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional

from apps.common import get_logger
from .protocols import Scheduler
from .scheduling import TimerScheduler

logger = get_logger(__name__).bind(component="storefront", layer="store", store="ToastChannel")

TOAST_TYPES = ("success", "error", "info", "warning")
DEFAULT_DURATION = 4000


@dataclass
class Toast:
    id: str
    type: str
    title: str
    message: str = ""
    duration: int = DEFAULT_DURATION


Listener = Callable[[List[Toast]], None]


class ToastChannel:
    """User-facing notifications; listeners receive the full list on every change.

    A toast with a positive ``duration`` (milliseconds) is dismissed by the
    scheduler once it elapses; zero keeps it until dismissed by hand.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None):
        self.toasts: List[Toast] = []
        self._listeners: List[Listener] = []
        self._scheduler = scheduler or TimerScheduler()
        self._lock = threading.RLock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = list(self.toasts)
        for listener in list(self._listeners):
            listener(snapshot)

    def add(self, type: str, title: str, message: str = "", duration: int = DEFAULT_DURATION) -> Toast:
        if type not in TOAST_TYPES:
            raise ValueError(f"Unknown toast type: {type}")
        toast = Toast(id=uuid.uuid4().hex, type=type, title=title, message=message, duration=duration)
        with self._lock:
            self.toasts.append(toast)
            logger.debug("Toast raised", type=type, title=title)
            self._notify()
        if duration > 0:
            self._scheduler.schedule(duration / 1000, lambda: self.dismiss(toast.id))
        return toast

    def success(self, title: str, message: str = "", **kwargs) -> Toast:
        return self.add("success", title, message, **kwargs)

    def error(self, title: str, message: str = "", **kwargs) -> Toast:
        return self.add("error", title, message, **kwargs)

    def info(self, title: str, message: str = "", **kwargs) -> Toast:
        return self.add("info", title, message, **kwargs)

    def warning(self, title: str, message: str = "", **kwargs) -> Toast:
        return self.add("warning", title, message, **kwargs)

    def dismiss(self, toast_id: str) -> None:
        with self._lock:
            remaining = [t for t in self.toasts if t.id != toast_id]
            if len(remaining) == len(self.toasts):
                return
            self.toasts = remaining
            self._notify()

    def clear(self) -> None:
        with self._lock:
            self.toasts = []
            self._notify()

    @property
    def last(self):
        return self.toasts[-1] if self.toasts else None
