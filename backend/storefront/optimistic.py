import copy
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .api_client import ApiError

S = TypeVar("S")
R = TypeVar("R")


@dataclass
class OptimisticResult(Generic[R]):
    ok: bool
    value: Optional[R] = None
    error: Optional[ApiError] = None


class OptimisticUpdater(Generic[S]):
    """Snapshot, apply locally, await the remote call, then confirm or revert.

    ``confirm`` maps the remote response to the authoritative state; without it
    the optimistic state stands.
    """

    def __init__(self, get_state: Callable[[], S], set_state: Callable[[S], None], logger=None):
        self.get_state = get_state
        self.set_state = set_state
        self.logger = logger

    def run(
        self,
        apply: Callable[[S], S],
        remote: Callable[[], R],
        confirm: Optional[Callable[[R], S]] = None,
        *,
        action: str = "update",
    ) -> OptimisticResult[R]:
        snapshot = copy.deepcopy(self.get_state())
        self.set_state(apply(copy.deepcopy(snapshot)))
        try:
            value = remote()
        except ApiError as exc:
            self.set_state(snapshot)
            if self.logger is not None:
                self.logger.warning("Rolled back optimistic change", action=action, error=exc.message)
            return OptimisticResult(ok=False, error=exc)
        if confirm is not None:
            self.set_state(confirm(value))
        return OptimisticResult(ok=True, value=value)
