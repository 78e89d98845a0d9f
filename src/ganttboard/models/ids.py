# Rev 0.2.0
"""Client-side identifiers: '<prefix>-<epoch ms>[-<random>]'."""
from __future__ import annotations
import random
import string
import threading
import time
from typing import Callable, Dict

_ALPHABET = string.ascii_lowercase + string.digits


class IdGenerator:
    """
    Millisecond timestamps are forced strictly increasing per prefix, so two
    creates inside the same clock tick still get distinct ids. Tasks also get
    a 9-char base36 suffix.
    """

    def __init__(self, clock: Callable[[], float] = time.time, rng: random.Random | None = None):
        self._clock = clock
        self._rng = rng or random.Random()
        self._last: Dict[str, int] = {}
        self._lock = threading.Lock()

    def _stamp(self, prefix: str) -> int:
        now = int(self._clock() * 1000)
        with self._lock:
            last = self._last.get(prefix, -1)
            if now <= last:
                now = last + 1
            self._last[prefix] = now
        return now

    def _suffix(self, length: int = 9) -> str:
        return "".join(self._rng.choice(_ALPHABET) for _ in range(length))

    def project_id(self) -> str:
        return f"project-{self._stamp('project')}"

    def department_id(self) -> str:
        return f"dept-{self._stamp('dept')}"

    def employee_id(self) -> str:
        return f"emp-{self._stamp('emp')}"

    def task_id(self) -> str:
        return f"task-{self._stamp('task')}-{self._suffix()}"
