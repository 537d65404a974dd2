"""Background thread that keeps a progress display ticking."""

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from progless.progress import ProgressState

__all__ = ["TICK_RATE", "SteadyTicker"]

# Seconds between steady ticks
TICK_RATE = 0.1


def _run(state: "ProgressState", dead: threading.Event, rate: float):
    """Ticker loop: tick until progress ends or the ticker is stopped.

    The wait is split in two halves so that a stop request is noticed
    within half a tick.
    """
    state.set_cursor(visible=False)
    try:
        while not dead.is_set():
            if not state.tick():
                break
            if dead.wait(rate / 2) or dead.wait(rate / 2):
                break
    except Exception as e:
        logging.exception("Ticker thread exception: %s", e)
    finally:
        state.set_cursor(visible=True)


class SteadyTicker:
    """Repaints a :class:`ProgressState` at a fixed cadence on a daemon thread.

    The thread only holds the state and its own stop event, never the ticker,
    so a forgotten ticker can still be collected. Collection only signals the
    thread to stop and does not join it, so the thread may finish one last
    tick afterwards. Call :meth:`stop` for a guaranteed quiet terminal.
    """

    def __init__(self, rate: float = TICK_RATE):
        self.rate = rate
        self._dead = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def start(self, state: "ProgressState"):
        """Start ticking ``state``, replacing (and joining) any previous thread."""
        with self._lock:
            old, self._thread = self._thread, None
            self._dead.set()
            # Fresh event per run; an old thread keeps its own (set) one
            self._dead = threading.Event()
            self._thread = threading.Thread(
                target=_run,
                args=(state, self._dead, self.rate),
                name="progless-ticker",
                daemon=True,
            )
            self._thread.start()
        if old is not None and old is not threading.current_thread():
            old.join()

    def stop(self):
        """Stop the thread and wait for it to exit."""
        with self._lock:
            thread, self._thread = self._thread, None
            self._dead.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def __del__(self):
        self._dead.set()
