"""Active tasks and the guards that retire them."""

from typing import TYPE_CHECKING

from progless import fitted
from progless.errors import EmptyTaskError, TaskOverflowError

if TYPE_CHECKING:
    from progless.progress import ProgressState

__all__ = ["TASK_PREFIX", "Task", "TaskGuard"]

# "    ↳ "
TASK_PREFIX = "    ↳ ".encode()
TASK_PREFIX_WIDTH = 6

MAX_TASK_WIDTH = 65_535


class Task:
    """A task name with its display width precomputed."""

    __slots__ = ("ansi", "name", "width")

    def __init__(self, name: str | bytes):
        data = name.encode() if isinstance(name, str) else bytes(name)
        if not data:
            raise EmptyTaskError()
        w = fitted.width(data)
        if w > MAX_TASK_WIDTH:
            raise TaskOverflowError()
        self.name = data
        self.width = w
        self.ansi = b"\x1b" in data

    def __eq__(self, other) -> bool:
        if isinstance(other, Task):
            return self.name == other.name
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"Task({self.name.decode(errors='replace')!r})"

    def push_to(self, buf: bytearray, width: int):
        """Append this task's display line, cropped to ``width`` columns."""
        avail = max(0, width - TASK_PREFIX_WIDTH)
        data = self.name
        if self.width > avail:
            end = fitted.length_width(data, avail)
            if not end:
                return
            data = data[:end]
        if self.ansi:
            data = fitted.strip_ansi(data)
        buf += TASK_PREFIX
        buf += data
        buf += b"\n"


class TaskGuard:
    """Handle for one in-flight unit of work.

    Releasing the guard removes the task from the display and counts it as
    done; cancelling removes it without counting. Only the first of the two
    has any effect. Guards left over from before a ``reset`` do nothing.

    Use as a context manager to release on exit::

        with progress.add("resize foo.png"):
            resize("foo.png")
    """

    __slots__ = ("_released", "_state", "cycle", "name")

    def __init__(self, name: bytes, cycle: int, state: "ProgressState"):
        self.name = name
        self.cycle = cycle
        self._state = state
        self._released = False

    def __enter__(self) -> "TaskGuard":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    def __repr__(self) -> str:
        status = "released" if self._released else "active"
        return f"TaskGuard({self.name.decode(errors='replace')!r}, cycle={self.cycle}, {status})"

    @property
    def released(self) -> bool:
        return self._released

    def release(self):
        """Remove the task and increment the done count."""
        self._finish(True)

    def cancel(self):
        """Remove the task without incrementing the done count."""
        self._finish(False)

    def _finish(self, inc: bool):
        if self._released:
            return
        self._released = True
        self._state.remove_guard(self.name, self.cycle, inc)
