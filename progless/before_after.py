"""Before/after value tracking for minifier-style summaries."""

from dataclasses import dataclass

__all__ = ["BeforeAfter"]


@dataclass
class BeforeAfter:
    """Track an arbitrary non-zero before and after value.

    Zero counts as unset, in which case the difference methods return None.

    >>> ba = BeforeAfter.start(100)
    >>> ba.stop(90)
    >>> ba.less()
    10
    """

    before: int | None = None
    after: int | None = None

    def __post_init__(self):
        self.before = self.before or None
        self.after = self.after or None

    @classmethod
    def start(cls, before: int) -> "BeforeAfter":
        return cls(before=before)

    def stop(self, after: int):
        self.after = after or None

    def less(self) -> int | None:
        """Return ``before - after`` when after is smaller, else None."""
        if self.before is None or self.after is None:
            return None
        return self.before - self.after if self.before > self.after else None

    def less_percent(self) -> float | None:
        less = self.less()
        return less / self.before if less is not None else None

    def more(self) -> int | None:
        """Return ``after - before`` when after is larger, else None."""
        if self.before is None or self.after is None:
            return None
        return self.after - self.before if self.after > self.before else None

    def more_percent(self) -> float | None:
        more = self.more()
        return more / self.before if more is not None else None
