from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from .logger import get_logger

logger = get_logger(__name__)


class IntervalTimer:
    """Calls ``callback`` every ``period`` seconds on a fixed grid.

    Each firing runs on its own daemon thread so a slow callback never delays
    the next firing. ``cancel`` stops future firings only; a callback that is
    already running is left alone.
    """

    def __init__(self, period: float, callback: Callable[[], object], name: str = "flowstream-timer") -> None:
        self.period = float(period)
        self._callback = callback
        self._name = name
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("timer already started")
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._cancelled.is_set()

    def _run(self) -> None:
        next_at = time.monotonic() + self.period
        while not self._cancelled.wait(max(next_at - time.monotonic(), 0.0)):
            threading.Thread(target=self._fire, name=f"{self._name}-tick", daemon=True).start()
            next_at += self.period
            now = time.monotonic()
            if next_at <= now:
                # fell behind (suspended process); skip the missed slots
                missed = int((now - next_at) // self.period) + 1
                next_at += missed * self.period
                logger.debug("timer skipped %d missed firing(s)", missed)

    def _fire(self) -> None:
        try:
            self._callback()
        except Exception:
            logger.exception("timer callback raised")
