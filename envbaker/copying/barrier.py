"""Counting join primitive for fan-out work."""

from __future__ import annotations

import threading


class CompletionBarrier:
    """Tracks outstanding units of work and releases waiters at zero.

    Units call :meth:`done` from any thread once they reach a terminal
    state; the orchestrator blocks in :meth:`wait` until none remain.
    """

    def __init__(self, count: int = 0) -> None:
        if count < 0:
            raise ValueError(f"Barrier count must be >= 0, got {count}")
        self._count = count
        self._cond = threading.Condition()

    @property
    def pending(self) -> int:
        with self._cond:
            return self._count

    def add(self, n: int = 1) -> None:
        with self._cond:
            if self._count + n < 0:
                raise ValueError("Barrier count would drop below zero")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the count reaches zero.

        Returns:
            False if ``timeout`` elapsed first, True otherwise
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)
