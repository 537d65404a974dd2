"""SIGINT policies for long-running progress work.

Only one policy can be installed per process; whichever is requested first
wins and later requests return it. Install before starting progress.

The handler never takes locks: it flips a plain attribute, writes the
cursor-show sequence with a raw ``os.write`` and changes the signal
disposition.
"""

import enum
import os
import signal
import sys

__all__ = [
    "SigintController",
    "SigintPolicy",
    "installed",
    "sigint_default",
    "sigint_keepalive",
    "sigint_two_strike",
]

CURSOR_SHOW = b"\x1b[?25h"


class SigintPolicy(enum.Enum):
    DEFAULT = "default"  # flag, restore cursor, die
    TWO_STRIKE = "two-strike"  # flag first, die on second
    KEEPALIVE = "keepalive"  # flag only


def _show_cursor():
    try:
        fd = sys.stderr.fileno()
        if os.isatty(fd):
            os.write(fd, CURSOR_SHOW)
    except (AttributeError, OSError, ValueError):
        pass


class SigintController:
    """Handle SIGINT according to a :class:`SigintPolicy`.

    Poll :attr:`killed` (or the controller's truth value) from the work loop
    to wind down early after the first interrupt.
    """

    def __init__(self, policy: SigintPolicy = SigintPolicy.TWO_STRIKE):
        self.policy = policy
        self.killed = False
        self._previous = None

    def __bool__(self) -> bool:
        return self.killed

    def __repr__(self) -> str:
        return f"SigintController({self.policy.value}, killed={self.killed})"

    def install(self) -> "SigintController":
        """Register the handler. Must be called from the main thread."""
        self._previous = signal.signal(signal.SIGINT, self.handle)
        return self

    def uninstall(self):
        """Restore the handler that was active before :meth:`install`."""
        global _installed
        previous = self._previous if self._previous is not None else signal.default_int_handler
        signal.signal(signal.SIGINT, previous)
        self._previous = None
        if _installed is self:
            _installed = None

    def handle(self, signum, frame):
        first = not self.killed
        self.killed = True
        if first:
            _show_cursor()

        if self.policy is SigintPolicy.KEEPALIVE:
            return
        if self.policy is SigintPolicy.TWO_STRIKE and first:
            # The next interrupt goes straight to the default disposition
            signal.signal(signal.SIGINT, signal.SIG_DFL)
            return
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        os.kill(os.getpid(), signal.SIGINT)


_installed: SigintController | None = None


def _install(policy: SigintPolicy) -> SigintController:
    global _installed
    if _installed is None:
        _installed = SigintController(policy).install()
    return _installed


def installed() -> SigintController | None:
    """Return the process-wide controller, if one was installed."""
    return _installed


def sigint_two_strike() -> SigintController:
    """First Ctrl+C sets the flag, the second kills the process."""
    return _install(SigintPolicy.TWO_STRIKE)


def sigint_keepalive() -> SigintController:
    """Every Ctrl+C only sets the flag; the program keeps running."""
    return _install(SigintPolicy.KEEPALIVE)


def sigint_default() -> SigintController:
    """Ctrl+C restores the cursor and terminates as usual."""
    return _install(SigintPolicy.DEFAULT)
