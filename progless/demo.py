"""Simulated batch work for showing off the progress display."""

import logging
import random
import threading
import time

from progless.msg import Msg, MsgKind
from progless.progress import Progress
from progless.signals import sigint_two_strike

__all__ = ["DemoWorkers", "run_demo"]

# Pretend file types to "scan"
FILE_TYPES = (
    "application/gzip",
    "application/json",
    "application/pdf",
    "application/zip",
    "audio/flac",
    "audio/mpeg",
    "font/woff2",
    "image/avif",
    "image/gif",
    "image/jpeg",
    "image/png",
    "image/svg+xml",
    "image/webp",
    "message/rfc822",
    "message/global",
    "text/css",
    "text/csv",
    "text/html",
    "text/markdown",
    "text/plain",
    "video/mp4",
    "video/webm",
)


class DemoWorkers:
    """Worker threads that pull names off a shared list and "process" them.

    Each name is tracked as a task on the progress bar for the duration of
    its fake work. Workers stop early once a SIGINT has been seen.
    """

    def __init__(self, workers: int, names: list[str], progress: Progress, delay: float = 0.003):
        self.workers = max(1, workers)
        self.names = names
        self.progress = progress
        self.delay = delay
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._next = 0
        self._quit = threading.Event()

    def start(self):
        """Start worker threads."""
        for i in range(self.workers):
            t = threading.Thread(target=self._worker, args=(i,), daemon=True)
            self._threads.append(t)
            t.start()

    def _claim(self) -> str | None:
        with self._lock:
            if self._quit.is_set() or self._next >= len(self.names):
                return None
            name = self.names[self._next]
            self._next += 1
            return name

    def _worker(self, worker_id: int):
        killed = sigint_two_strike()
        try:
            while not killed.killed and (name := self._claim()) is not None:
                with self.progress.add(name):
                    if name.startswith("message/"):
                        self.progress.push_msg(Msg.custom("Found", 199, name).with_newline())
                    time.sleep(len(name) * self.delay * random.uniform(0.5, 1.5))
        except Exception as e:
            logging.exception("Worker thread exception: %s", e)

    def join(self):
        """Wait for all workers to run out of work."""
        for t in self._threads:
            t.join()

    def stop(self):
        """Signal workers to stop and wait for them."""
        self._quit.set()
        self.join()


def run_serial(names: list[str], progress: Progress, delay: float):
    """Single-threaded variant: one task at a time, counted by hand."""
    killed = sigint_two_strike()
    for name in names:
        if killed.killed:
            break
        progress.set_title(Msg.info(f"Looking at {name}…"))
        time.sleep(len(name) * delay)
        progress.increment()


def run_demo(count: int = 1, threads: int = 4, serial: bool = False):
    """Run the demo ``count`` times over the fake file types."""
    sigint_two_strike()
    names = list(FILE_TYPES) * max(1, count)
    random.shuffle(names)

    progress = Progress.steady(
        len(names),
        title=Msg.custom("Scanning", 199, 'Pretending to look for "message" file types…'),
    )
    try:
        if serial:
            run_serial(names, progress, delay=0.01)
        else:
            workers = DemoWorkers(threads, names, progress)
            workers.start()
            try:
                workers.join()
            finally:
                workers.stop()
    finally:
        progress.finish()

    progress.summary(MsgKind.CRUNCHED, "type", "types").eprint()
