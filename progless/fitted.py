"""Display widths and width-fitting for UTF-8 byte strings.

ANSI sequences (ESC up to an ``m``, ``A`` or ``K`` terminator) and control
characters take no columns. Pure ASCII is counted one byte per column;
anything else is decoded and measured per character with rich's cell table.
Combining marks and emoji sequences are measured per code point, which is
an approximation.
"""

from rich.cells import cell_len

__all__ = [
    "fit",
    "length_width",
    "strip_ansi",
    "width",
]

# Bytes that close an ANSI sequence
_ANSI_END = frozenset(b"mAK")


def _char_width(ch: str) -> int:
    if ch < " " or "\x7f" <= ch < "\xa0":
        return 0
    return cell_len(ch)


def width(data: bytes) -> int:
    """Return the display width of ``data`` in terminal columns."""
    w = 0
    in_ansi = False
    for i, b in enumerate(data):
        if b >= 0x80:
            return _width_unicode(data[i:], w, in_ansi)
        if in_ansi:
            if b in _ANSI_END:
                in_ansi = False
        elif b == 0x1B:
            in_ansi = True
        elif b >= 0x20 and b != 0x7F:
            w += 1
    return w


def _width_unicode(data: bytes, w: int, in_ansi: bool) -> int:
    try:
        text = data.decode()
    except UnicodeDecodeError:
        return w + len(data)

    for ch in text:
        if in_ansi:
            if ch in "mAK":
                in_ansi = False
        elif ch == "\x1b":
            in_ansi = True
        else:
            w += _char_width(ch)
    return w


def length_width(data: bytes, stop: int) -> int:
    """Return how many leading bytes of ``data`` fit within ``stop`` columns.

    The result always lands on a character boundary. ANSI sequences inside
    the fitted range are kept.
    """
    n = len(data)
    if n <= stop:
        return n

    w = 0
    in_ansi = False
    for i, b in enumerate(data):
        if b >= 0x80:
            return _length_width_unicode(data[i:], i, w, stop, in_ansi)
        if in_ansi:
            if b in _ANSI_END:
                in_ansi = False
        elif b == 0x1B:
            in_ansi = True
        elif b < 0x20 or b == 0x7F:
            pass
        elif w + 1 > stop:
            return i
        else:
            w += 1
    return n


def _length_width_unicode(data: bytes, length: int, w: int, stop: int, in_ansi: bool) -> int:
    try:
        text = data.decode()
    except UnicodeDecodeError:
        return length

    for ch in text:
        ch_len = len(ch.encode())
        if in_ansi:
            if ch in "mAK":
                in_ansi = False
        elif ch == "\x1b":
            in_ansi = True
        else:
            w2 = w + _char_width(ch)
            if w2 > stop:
                return length
            w = w2
        length += ch_len
    return length


def fit(data: bytes, stop: int) -> bytes:
    """Crop ``data`` to at most ``stop`` columns."""
    return data[: length_width(data, stop)]


def strip_ansi(data: bytes) -> bytes:
    """Remove ANSI sequences, keeping everything else."""
    if 0x1B not in data:
        return data
    out = bytearray()
    in_ansi = False
    for b in data:
        if in_ansi:
            if b in _ANSI_END:
                in_ansi = False
        elif b == 0x1B:
            in_ansi = True
        else:
            out.append(b)
    return bytes(out)
