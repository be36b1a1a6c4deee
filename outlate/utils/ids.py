import itertools
import uuid
from typing import Callable

IdSource = Callable[[], str]


class CounterIdSource:
    """Monotonic ``<prefix>-<n>`` ids, reproducible across runs."""

    def __init__(self, prefix: str = "id", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


def uuid_id_source() -> str:
    return str(uuid.uuid4())
