"""
apikit.tier1_runtime.background
───────────────────────────────
Fire-and-forget work off the request path (e.g. sending a welcome email
after a signup response). Each job runs in a daemon thread tracked by a
BackgroundGroup, so shutdown code can wait for in-flight jobs to finish.
"""
from __future__ import annotations

import threading
from typing import Callable

from apikit.tier0_core.logging import get_logger

log = get_logger(__name__)


class BackgroundGroup:
    """Counts running jobs; wait() blocks until the count drops to zero."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    def add(self, n: int = 1) -> None:
        with self._cond:
            self._count += n
            if self._count < 0:
                raise ValueError("BackgroundGroup counter went negative")
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        """Return True once all jobs finished, False if `timeout` elapsed first."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)

    @property
    def running(self) -> int:
        with self._cond:
            return self._count


def run_in_background(fn: Callable[[], object], group: BackgroundGroup) -> threading.Thread:
    """
    Run `fn` in a daemon thread registered with `group`.

    An exception raised by `fn` is logged with its traceback instead of
    killing the thread silently.
    """
    group.add()

    def _run() -> None:
        try:
            fn()
        except Exception:
            log.exception("background_job_failed", job=getattr(fn, "__name__", repr(fn)))
        finally:
            group.done()

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    return thread


__all__ = ["BackgroundGroup", "run_in_background"]
