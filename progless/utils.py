"""Utility functions for formatting numbers and durations."""

__all__ = [
    "format_elapsed",
    "format_hms",
    "format_int",
    "format_percent",
    "inflect",
]


def format_int(value: int) -> str:
    """Format an integer with thousands separators, e.g. 1,001."""
    return f"{max(0, int(value)):,}"


def format_percent(fraction: float) -> str:
    """Format a 0..1 fraction as a percentage with two decimals."""
    fraction = min(1.0, max(0.0, fraction))
    return f"{fraction * 100:.2f}%"


def format_hms(seconds: float) -> str:
    """Format seconds as a fixed-width HH:MM:SS clock.

    Hours saturate at 99 so the result is always eight characters.
    """
    secs = max(0, int(seconds))
    if secs >= 100 * 3600:
        return "99:59:59"
    h, rem = divmod(secs, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_elapsed(seconds: float) -> str:
    """Format seconds as human-readable words.

    Examples: "0 seconds", "1 minute and 3 seconds",
    "1 hour, 2 minutes, and 3 seconds".
    """
    secs = max(0, int(seconds))
    d, rem = divmod(secs, 86400)
    h, rem = divmod(rem, 3600)
    m, s = divmod(rem, 60)

    parts = [
        inflect(n, unit, unit + "s")
        for n, unit in ((d, "day"), (h, "hour"), (m, "minute"), (s, "second"))
        if n
    ]
    if not parts:
        return "0 seconds"
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return f"{parts[0]} and {parts[1]}"
    return ", ".join(parts[:-1]) + f", and {parts[-1]}"


def inflect(count: int, singular: str, plural: str) -> str:
    """Return e.g. "1 file" or "1,234 files"."""
    noun = singular if count == 1 else plural
    return f"{format_int(count)} {noun}"
