"""Thread-safe CLI progress with a live display redrawn in place.

The display is one pre-built frame held in a :class:`RenderBuffer`::

    [optional title]
    [00:01:23]  [#######-------]  1,234/5,000  24.68%
        ↳ task one
        ↳ task two

Only the fields that changed since the last tick are rewritten. The frame
is written in a single call after erasing the previous one, and skipped
entirely when nothing visible changed.

Worker threads report through :class:`Progress`; a :class:`SteadyTicker`
repaints in the background so the clock keeps moving during slow work.
"""

import logging
import os
import sys
import threading
import time
from collections.abc import Sized
from enum import IntFlag

from progless import signals
from progless.errors import EmptyTotalError, TotalOverflowError
from progless.msg import Msg, MsgKind
from progless.partitions import RenderBuffer
from progless.steady import SteadyTicker
from progless.task import Task, TaskGuard
from progless.utils import format_elapsed, format_hms, format_int, format_percent, inflect

__all__ = ["MAX_TOTAL", "Progress", "ProgressState", "term_width"]

# Totals are tracked as 32-bit counters
MAX_TOTAL = 4_294_967_295

# Back-to-back ticks closer than this are skipped (milliseconds)
MIN_TICK_INTERVAL = 60

# Narrower terminals get no display at all
MIN_DRAW_WIDTH = 40

# Narrower bars are dropped
MIN_BARS_WIDTH = 10

# Task lines shown below the bar before collapsing the rest
MAX_TASK_LINES = 10

CURSOR_HIDE = b"\x1b[?25l"
CURSOR_SHOW = b"\x1b[?25h"

# Cursor to column 1, clear line; then once per line: up, column 1, clear
_CLS_FIRST = b"\x1b[1000D\x1b[K"
_CLS_LINE = b"\x1b[1A\x1b[1000D\x1b[K"

# Partition indexes, in buffer order
PART_TITLE = 0
PART_ELAPSED = 1
PART_BAR_DONE = 2
PART_BAR_UNDONE = 3
PART_DONE = 4
PART_TOTAL = 5
PART_PERCENT = 6
PART_DOING = 7

# Literal bytes interleaved with (name, initial value) fields
_FRAME = (
    ("title", b""),
    b"\x1b[2m[\x1b[0;1m",
    ("elapsed", b"00:00:00"),
    b"\x1b[0;2m]\x1b[0m  \x1b[2m[\x1b[0;1;96m",
    ("bar_done", b""),
    b"\x1b[0;1;34m",
    ("bar_undone", b""),
    b"\x1b[0;2m]\x1b[0m  \x1b[1;96m",
    ("done", b"0"),
    b"\x1b[0;2m/\x1b[0;1;34m",
    ("total", b"0"),
    b"\x1b[0;1m  ",
    ("percent", b"0.00%"),
    b"\x1b[0m\n",
    ("doing", b""),
)

# Visible literal columns on the progress line
_LINE_OVERHEAD = 11


class _Dirty(IntFlag):
    """Fields needing a rewrite on the next tick."""

    NONE = 0
    BAR = 1
    DOING = 2
    DONE = 4
    PERCENT = 8
    TITLE = 16
    TOTAL = 32
    NEW = BAR | DOING | DONE | PERCENT | TITLE | TOTAL
    RESIZED = BAR | DOING | TITLE


def term_width(stream=None) -> int:
    """Return the usable width of the terminal behind ``stream``.

    One less than the real width to stay clear of the right edge; 0 when
    the stream is not a terminal.
    """
    stream = stream if stream is not None else sys.stderr
    try:
        return max(0, os.get_terminal_size(stream.fileno()).columns - 1)
    except (AttributeError, OSError, ValueError):
        return 0


def _check_total(total) -> int:
    if isinstance(total, bool) or not isinstance(total, int):
        raise TypeError(f"Progress total must be an int, not {type(total).__name__}")
    if total <= 0:
        raise EmptyTotalError()
    if total > MAX_TOTAL:
        raise TotalOverflowError()
    return total


def _new_buffer() -> RenderBuffer:
    buf = bytearray()
    bounds = []
    for piece in _FRAME:
        if isinstance(piece, tuple):
            start = len(buf)
            buf += piece[1]
            bounds.append((start, len(buf)))
        else:
            buf += piece
    return RenderBuffer(buf, bounds)


def _as_title(title) -> Msg | None:
    if title is None:
        return None
    if isinstance(title, (bytes, bytearray)):
        title = title.decode(errors="replace")
    if isinstance(title, str):
        title = Msg.plain(title)
    return None if title.is_empty() else title


class ProgressState:
    """Shared progress state and renderer.

    Every mutation and every paint happens under one lock, so a repaint
    never sees a half-updated task list. Setters are no-ops once progress
    has stopped (until :meth:`reset`).
    """

    def __init__(self, total: int, stream=None):
        self._total = _check_total(total)
        self._lock = threading.Lock()
        self._stream = stream

        self._buf = _new_buffer()
        self._dirty = _Dirty.NEW
        self._running = True
        self._sigint = False

        # What was last painted, and how many lines it took
        self._last_frame = b""
        self._last_lines = 0
        self._last_width = 0

        self._started = time.perf_counter()
        self._elapsed_ms = 0  # as of the last tick, frozen on stop

        self._title: Msg | None = None
        self._done = 0
        self._tasks: list[Task] = []
        self.cycle = 0

    # Getters

    @property
    def done(self) -> int:
        return self._done

    @property
    def total(self) -> int:
        return self._total

    @property
    def running(self) -> bool:
        return self._running

    @property
    def elapsed(self) -> float:
        """Seconds since start (or reset), frozen once stopped."""
        if self._running:
            return time.perf_counter() - self._started
        return self._elapsed_ms / 1000

    @property
    def tasks(self) -> list[str]:
        with self._lock:
            return [t.name.decode(errors="replace") for t in self._tasks]

    def percent(self) -> float:
        with self._lock:
            done, total = self._done, self._total
        if done == 0:
            return 0.0
        if done >= total:
            return 1.0
        return done / total

    def _now_ms(self) -> int:
        return int((time.perf_counter() - self._started) * 1000)

    # Setters

    def increment(self):
        self.add(1)

    def add(self, n: int):
        """Increase the done count by ``n``, clamped to the total."""
        if n <= 0:
            return
        with self._lock:
            if self._running:
                self._set_done_locked(self._done + n)

    def set_done(self, done: int):
        """Set the done count outright.

        Unlike :meth:`add` this can move backwards, so it is a poor fit for
        uncoordinated parallel work.
        """
        with self._lock:
            if self._running:
                self._set_done_locked(max(0, done))

    def _set_done_locked(self, done: int):
        done = min(done, self._total)
        if done != self._done:
            if done == self._total:
                self._stop_locked()
            else:
                self._done = done
                self._dirty |= _Dirty.DONE | _Dirty.PERCENT | _Dirty.BAR

    def add_task(self, name: str | bytes) -> TaskGuard:
        """Show ``name`` as in progress and return a guard that retires it."""
        task = Task(name)
        with self._lock:
            if self._running:
                self._tasks.append(task)
                self._dirty |= _Dirty.DOING
            return TaskGuard(task.name, self.cycle, self)

    def remove_task(self, name: str | bytes):
        """Remove the first task matching ``name`` and count it as done."""
        data = name.encode() if isinstance(name, str) else bytes(name)
        with self._lock:
            if self._running and self._remove_locked(data):
                self._set_done_locked(self._done + 1)

    def remove_guard(self, name: bytes, cycle: int, inc: bool):
        """Retire a guarded task; guards from an earlier cycle are ignored."""
        with self._lock:
            if not self._running or cycle != self.cycle:
                return
            if self._remove_locked(name) and inc:
                self._set_done_locked(self._done + 1)

    def _remove_locked(self, name: bytes) -> bool:
        for i, task in enumerate(self._tasks):
            if task.name == name:
                del self._tasks[i]
                self._dirty |= _Dirty.DOING
                return True
        return False

    def update(self, n: int = 1, title=None, task: str | bytes | None = None) -> TaskGuard | None:
        """Advance by ``n``, replace the title and add a task in one step.

        A ``title`` of None leaves the current title alone. Returns the guard
        for ``task`` if one was given; like :meth:`add_task`, the guard is
        inert once progress has stopped.
        """
        new_task = Task(task) if task is not None else None
        with self._lock:
            guard = None
            if new_task is not None:
                guard = TaskGuard(new_task.name, self.cycle, self)
            if not self._running:
                return guard
            if new_task is not None:
                self._tasks.append(new_task)
                self._dirty |= _Dirty.DOING
            if title is not None:
                self._set_title_locked(title)
            if n > 0:
                self._set_done_locked(self._done + n)
            return guard

    def set_title(self, title):
        """Set (or with None, clear) the line shown above the bar."""
        with self._lock:
            if self._running:
                self._set_title_locked(title)

    def _set_title_locked(self, title):
        self._title = _as_title(title)
        self._dirty |= _Dirty.TITLE

    def sigint(self):
        """Flag an early shutdown; purely cosmetic."""
        with self._lock:
            if self._running and not self._sigint:
                self._sigint = True
                self._set_title_locked(Msg.warning("Early shutdown in progress."))

    # Lifecycle

    def stop(self):
        """End progress: done = total, tasks cleared, display erased."""
        with self._lock:
            self._stop_locked()

    def _stop_locked(self):
        if not self._running:
            return
        self._running = False
        self._dirty = _Dirty.NONE
        self._elapsed_ms = self._now_ms()
        self._done = self._total
        self._tasks.clear()
        self._print_blank()

    def reset(self, total: int):
        """Start a new cycle with a new total, keeping the title.

        Guards handed out before the reset become inert.
        """
        total = _check_total(total)
        with self._lock:
            self._print_blank()
            self._total = total
            self._done = 0
            self._tasks.clear()
            self.cycle = (self.cycle + 1) & 0xFF
            self._started = time.perf_counter()
            self._elapsed_ms = 0
            self._buf.write_at(PART_ELAPSED, b"00:00:00")
            self._sigint = False
            self._dirty = _Dirty.NEW
            self._running = True

    # Rendering

    def tick(self, force: bool = False) -> bool:
        """Repaint if enough time has passed (or ``force``).

        Returns False once progress is no longer running.
        """
        if not self._running:
            return False

        now_ms = self._now_ms()
        if not force and now_ms - self._elapsed_ms < MIN_TICK_INTERVAL:
            return True

        controller = signals.installed()
        if controller is not None and controller.killed:
            self.sigint()

        with self._lock:
            if not self._running:
                return False

            time_changed = self._tick_set_secs(now_ms)
            width = self._tick_set_width()
            if width < MIN_DRAW_WIDTH:
                self._print_blank()
                return True

            if not (time_changed or force or self._dirty or not self._last_frame):
                return True

            self._tick_set_doing(width)
            self._tick_set_done()
            self._tick_set_percent()
            self._tick_set_title(width)
            self._tick_set_total()
            # The bar takes whatever the other fields leave over
            self._tick_set_bar(width)
            self._preprint()
        return True

    def _take(self, flag: _Dirty) -> bool:
        if self._dirty & flag:
            self._dirty &= ~flag
            return True
        return False

    def _tick_set_secs(self, now_ms: int) -> bool:
        before = self._elapsed_ms
        self._elapsed_ms = now_ms
        secs = now_ms // 1000
        if secs == before // 1000:
            return False
        self._buf.write_at(PART_ELAPSED, format_hms(secs).encode())
        return True

    def _tick_set_width(self) -> int:
        width = term_width(self._stream)
        if width != self._last_width:
            self._last_width = width
            self._dirty |= _Dirty.RESIZED
        return width

    def _tick_set_doing(self, width: int):
        if not self._take(_Dirty.DOING):
            return
        if not self._tasks:
            self._buf.truncate(PART_DOING, 0)
            return
        out = bytearray(b"\x1b[35m")
        for task in self._tasks[:MAX_TASK_LINES]:
            task.push_to(out, width)
        hidden = len(self._tasks) - MAX_TASK_LINES
        if hidden > 0:
            out += f"\x1b[2m    … and {inflect(hidden, 'other', 'others')}\n".encode()
        out += b"\x1b[0m"
        self._buf.replace(PART_DOING, bytes(out))

    def _tick_set_done(self):
        if self._take(_Dirty.DONE):
            self._buf.replace(PART_DONE, format_int(self._done).encode())

    def _tick_set_percent(self):
        if self._take(_Dirty.PERCENT):
            pct = 0.0 if not self._done else self._done / self._total
            self._buf.replace(PART_PERCENT, format_percent(pct).encode())

    def _tick_set_title(self, width: int):
        if not self._take(_Dirty.TITLE):
            return
        if self._title is None:
            self._buf.truncate(PART_TITLE, 0)
            return
        data = self._title.fitted(max(0, width - 1))
        if not data.endswith(b"\n"):
            data += b"\n"
        self._buf.replace(PART_TITLE, data)

    def _tick_set_total(self):
        if self._take(_Dirty.TOTAL):
            self._buf.replace(PART_TOTAL, format_int(self._total).encode())

    def _bar_widths(self, width: int) -> tuple[int, int]:
        buf = self._buf
        space = width - (
            _LINE_OVERHEAD
            + buf.length(PART_ELAPSED)
            + buf.length(PART_DONE)
            + buf.length(PART_TOTAL)
            + buf.length(PART_PERCENT)
        )
        if space < MIN_BARS_WIDTH:
            return 0, 0
        if self._done >= self._total:
            return space, 0
        done = self._done * space // self._total
        return done, space - done

    def _tick_set_bar(self, width: int):
        if not self._take(_Dirty.BAR):
            return
        w_done, w_undone = self._bar_widths(width)
        self._buf.replace(PART_BAR_UNDONE, b"-" * w_undone)
        self._buf.replace(PART_BAR_DONE, b"#" * w_done)

    def _preprint(self):
        frame = self._buf.as_bytes()
        if frame == self._last_frame:
            return
        out = self._cls()
        self._last_lines = frame.count(b"\n")
        self._last_frame = frame
        self._write(out + frame)

    def _cls(self) -> bytes:
        lines, self._last_lines = self._last_lines, 0
        if not lines:
            return b""
        return _CLS_FIRST + _CLS_LINE * lines

    def _print_blank(self):
        self._last_frame = b""
        cls = self._cls()
        if cls:
            self._write(cls)

    def _write(self, data: bytes):
        """Write to the output stream, ignoring I/O errors."""
        stream = self._stream if self._stream is not None else sys.stderr
        try:
            target = getattr(stream, "buffer", None)
            if target is None:
                target = stream
            else:
                stream.flush()
            target.write(data)
            target.flush()
        except (OSError, ValueError) as e:
            logging.debug("Progress write failed: %s", e)

    def set_cursor(self, visible: bool):
        """Show or hide the cursor, if the stream is a terminal."""
        stream = self._stream if self._stream is not None else sys.stderr
        try:
            isatty = stream.isatty()
        except (AttributeError, ValueError):
            isatty = False
        if isatty:
            with self._lock:
                self._write(CURSOR_SHOW if visible else CURSOR_HIDE)

    def push_msg(self, msg: Msg | str):
        """Print a message above the live display without garbling it."""
        if isinstance(msg, str):
            msg = Msg.plain(msg)
        data = bytes(msg)
        if not data.endswith(b"\n"):
            data += b"\n"
        with self._lock:
            self._print_blank()
            self._write(data)


class Progress:
    """A thread-safe CLI progress bar.

    Count work with :meth:`increment`, or track named tasks with :meth:`add`
    and the returned guard (which increments when released)::

        with Progress.steady(len(files), title=Msg.info("Crunching")) as pbar:
            for f in files:
                with pbar.add(f.name):
                    crunch(f)

    A plain ``Progress(total)`` only paints when :meth:`tick` is called;
    :meth:`steady` adds a background ticker.
    """

    def __init__(self, total: int, title=None, stream=None):
        self._state = ProgressState(total, stream=stream)
        self._ticker = SteadyTicker()
        self._steady = False
        if title is not None:
            self._state.set_title(title)

    @classmethod
    def try_from(cls, value, **kwargs) -> "Progress":
        """Build from a count or anything with a length."""
        total = len(value) if isinstance(value, Sized) and not isinstance(value, (str, bytes)) else value
        return cls(total, **kwargs)

    @classmethod
    def steady(cls, total: int, title=None, stream=None) -> "Progress":
        """Build and start ticking in the background."""
        progress = cls(total, title=title, stream=stream)
        progress._steady = True
        progress._ticker.start(progress._state)
        return progress

    def __enter__(self) -> "Progress":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.finish()

    def __repr__(self) -> str:
        return f"Progress({self.done}/{self.total}, running={self.running})"

    @property
    def state(self) -> ProgressState:
        return self._state

    @property
    def done(self) -> int:
        return self._state.done

    @property
    def total(self) -> int:
        return self._state.total

    @property
    def running(self) -> bool:
        return self._state.running

    @property
    def elapsed(self) -> float:
        return self._state.elapsed

    @property
    def ticking(self) -> bool:
        """Whether the background ticker thread is alive."""
        return self._ticker.running

    def percent(self) -> float:
        return self._state.percent()

    def with_title(self, title) -> "Progress":
        self._state.set_title(title)
        return self

    def set_title(self, title):
        self._state.set_title(title)

    def set_reticulating_splines(self, app: str):
        """Use "<app>: Reticulating splines…" as the title."""
        self._state.set_title(Msg.custom(app, 199, "Reticulating splines…"))

    def add(self, task: str | bytes) -> TaskGuard:
        return self._state.add_task(task)

    task = add

    def remove(self, task: str | bytes):
        self._state.remove_task(task)

    def increment(self):
        self._state.increment()

    def increment_n(self, n: int):
        self._state.add(n)

    def set_done(self, done: int):
        self._state.set_done(done)

    def update(self, n: int = 1, title=None, task: str | bytes | None = None) -> TaskGuard | None:
        return self._state.update(n, title, task)

    def tick(self, force: bool = False) -> bool:
        return self._state.tick(force)

    def sigint(self):
        self._state.sigint()

    def push_msg(self, msg: Msg | str):
        self._state.push_msg(msg)

    def finish(self):
        """Stop the ticker, erase the display and freeze the clock."""
        self._ticker.stop()
        self._state.stop()

    def reset(self, total: int):
        """Start over with a new total; restarts the ticker if steady."""
        self._state.reset(total)
        if self._steady:
            self._ticker.start(self._state)

    def summary(self, kind: MsgKind, singular: str, plural: str) -> Msg:
        """E.g. "Crunched: 1,001 files in 3 minutes and 2 seconds."."""
        done = self._state.done
        text = f"{inflect(done, singular, plural)} in {format_elapsed(self.elapsed)}."
        return Msg(text, kind).with_newline()

    def finished_msg(self) -> Msg:
        """Generic "Done: Finished in X." message."""
        return Msg.done(f"Finished in {format_elapsed(self.elapsed)}.").with_newline()
