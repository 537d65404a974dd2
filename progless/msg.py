"""Prefixed, ANSI-styled one-line messages."""

import sys
import time
from enum import Enum

from progless.fitted import length_width, strip_ansi

__all__ = ["Msg", "MsgKind", "strip_ansi_str"]

# Custom prefixes longer than this are dropped
MAX_PREFIX_LEN = 45


def strip_ansi_str(text: str) -> str:
    """Text version of :func:`progless.fitted.strip_ansi`."""
    if "\x1b" not in text:
        return text
    return strip_ansi(text.encode()).decode(errors="replace")


class MsgKind(Enum):
    """Built-in message prefixes: (label, SGR color codes)."""

    NONE = ("", "")
    CONFIRM = ("Confirm", "1;38;5;208")
    CRUNCHED = ("Crunched", "92;1")
    DEBUG = ("Debug", "96;1")
    DONE = ("Done", "92;1")
    ERROR = ("Error", "91;1")
    INFO = ("Info", "95;1")
    NOTICE = ("Notice", "95;1")
    SUCCESS = ("Success", "92;1")
    TASK = ("Task", "1;38;5;199")
    WARNING = ("Warning", "93;1")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def prefix(self) -> str:
        label, color = self.value
        if not label:
            return ""
        return f"\x1b[{color}m{label}:\x1b[0m "

    @classmethod
    def from_name(cls, name: str) -> "MsgKind":
        """Look up a kind by CLI name; unknown names map to NONE."""
        name = name.strip().lower()
        if name == "prompt":
            return cls.CONFIRM
        for kind in cls:
            if kind.label.lower() == name and kind is not cls.NONE:
                return kind
        return cls.NONE


class Msg:
    """A message with an optional colored prefix.

    Builder methods (``with_*``) modify the message in place and return it.
    """

    __slots__ = ("_prefix", "indent", "newline", "text", "timestamp")

    def __init__(self, text: str = "", kind: MsgKind = MsgKind.NONE):
        self.text = text
        self._prefix = kind.prefix
        self.indent = 0
        self.newline = False
        self.timestamp = False

    @classmethod
    def custom(cls, prefix: str, color: int, text: str) -> "Msg":
        """Message with a custom prefix in a 256-color code."""
        msg = cls(text)
        if prefix and len(prefix.encode()) <= MAX_PREFIX_LEN:
            msg._prefix = f"\x1b[1;38;5;{int(color) & 0xFF}m{prefix}:\x1b[0m "
        return msg

    @classmethod
    def plain(cls, text: str) -> "Msg":
        return cls(text)

    @classmethod
    def confirm(cls, text: str) -> "Msg":
        return cls(text, MsgKind.CONFIRM)

    @classmethod
    def crunched(cls, text: str) -> "Msg":
        return cls(text, MsgKind.CRUNCHED)

    @classmethod
    def debug(cls, text: str) -> "Msg":
        return cls(text, MsgKind.DEBUG)

    @classmethod
    def done(cls, text: str) -> "Msg":
        return cls(text, MsgKind.DONE)

    @classmethod
    def error(cls, text: str) -> "Msg":
        return cls(text, MsgKind.ERROR)

    @classmethod
    def info(cls, text: str) -> "Msg":
        return cls(text, MsgKind.INFO)

    @classmethod
    def notice(cls, text: str) -> "Msg":
        return cls(text, MsgKind.NOTICE)

    @classmethod
    def success(cls, text: str) -> "Msg":
        return cls(text, MsgKind.SUCCESS)

    @classmethod
    def task(cls, text: str) -> "Msg":
        return cls(text, MsgKind.TASK)

    @classmethod
    def warning(cls, text: str) -> "Msg":
        return cls(text, MsgKind.WARNING)

    def with_indent(self, indent: int) -> "Msg":
        self.indent = max(0, min(int(indent), 4))
        return self

    def with_newline(self, newline: bool = True) -> "Msg":
        self.newline = newline
        return self

    def with_timestamp(self, timestamp: bool = True) -> "Msg":
        self.timestamp = timestamp
        return self

    @property
    def prefix(self) -> str:
        return self._prefix

    def is_empty(self) -> bool:
        return not (self._prefix or self.text)

    def _content(self) -> str:
        out = "    " * self.indent + self._prefix + self.text
        if self.timestamp:
            stamp = time.strftime("%Y-%m-%d %H:%M:%S")
            out += f"  \x1b[2m[\x1b[0;34m{stamp}\x1b[0;2m]\x1b[0m"
        return out

    def __str__(self) -> str:
        return self._content() + ("\n" if self.newline else "")

    def __bytes__(self) -> bytes:
        return str(self).encode()

    def __repr__(self) -> str:
        return f"Msg({str(self)!r})"

    def as_bytes(self) -> bytes:
        return bytes(self)

    def fitted(self, width: int) -> bytes:
        """Return the message cropped to ``width`` columns.

        A cropped message that carries styling gets a trailing reset so the
        color cannot bleed into what follows.
        """
        data = self._content().encode()
        end = length_width(data, width)
        out = data[:end]
        if end < len(data) and b"\x1b" in out:
            out += b"\x1b[0m"
        if self.newline:
            out += b"\n"
        return out

    def print(self, file=None):
        """Write the message to stdout (or ``file``).

        Styling is stripped when the destination is not a terminal.
        """
        file = file if file is not None else sys.stdout
        text = str(self)
        isatty = getattr(file, "isatty", None)
        if not (isatty and isatty()):
            text = strip_ansi_str(text)
        file.write(text)
        file.flush()

    def eprint(self):
        self.print(sys.stderr)

    def prompt(self, default: bool = False, file=None) -> bool:
        """Ask a yes/no question on stderr and return the answer."""
        file = file if file is not None else sys.stderr
        hint = "[Y/n]" if default else "[y/N]"
        prefix = self._prefix or MsgKind.CONFIRM.prefix
        line = "    " * self.indent + prefix + self.text + f" \x1b[2m{hint}\x1b[0m "
        while True:
            Msg(line).print(file)
            try:
                answer = input().strip().lower()
            except EOFError:
                return default
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
