"""progless - Thread-safe CLI progress bars and styled status messages.

This package provides a live, in-place redrawn progress display that any
number of worker threads can report to, along with prefixed one-line
messages for ordinary CLI output.
"""

from progless.before_after import BeforeAfter
from progless.errors import (
    EmptyTaskError,
    EmptyTotalError,
    ProglessError,
    TaskOverflowError,
    TotalOverflowError,
)
from progless.msg import Msg, MsgKind
from progless.partitions import PartitionTable, RenderBuffer
from progless.progress import Progress
from progless.signals import sigint_default, sigint_keepalive, sigint_two_strike
from progless.task import TaskGuard
from progless.utils import format_elapsed, format_hms, format_int, format_percent

try:
    from progless._version import __version__
except ImportError:
    __version__ = "0.0.0.dev0"

__all__ = [
    "BeforeAfter",
    "EmptyTaskError",
    "EmptyTotalError",
    "Msg",
    "MsgKind",
    "PartitionTable",
    "ProglessError",
    "Progress",
    "RenderBuffer",
    "TaskGuard",
    "TaskOverflowError",
    "TotalOverflowError",
    "__version__",
    "format_elapsed",
    "format_hms",
    "format_int",
    "format_percent",
    "sigint_default",
    "sigint_keepalive",
    "sigint_two_strike",
]
