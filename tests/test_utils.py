import pytest

from progless.before_after import BeforeAfter
from progless.utils import format_elapsed, format_hms, format_int, format_percent, inflect


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (999, "999"), (1001, "1,001"), (4_294_967_295, "4,294,967,295")],
)
def test_format_int(value, expected):
    assert format_int(value) == expected


def test_format_percent():
    assert format_percent(0) == "0.00%"
    assert format_percent(0.1234) == "12.34%"
    assert format_percent(1) == "100.00%"
    assert format_percent(2) == "100.00%"


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (3723, "01:02:03"),
        (360_000, "99:59:59"),
    ],
)
def test_format_hms(seconds, expected):
    assert format_hms(seconds) == expected


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "0 seconds"),
        (1, "1 second"),
        (63, "1 minute and 3 seconds"),
        (3723, "1 hour, 2 minutes, and 3 seconds"),
        (7200, "2 hours"),
        (86_401, "1 day and 1 second"),
    ],
)
def test_format_elapsed(seconds, expected):
    assert format_elapsed(seconds) == expected


def test_inflect():
    assert inflect(1, "file", "files") == "1 file"
    assert inflect(1234, "file", "files") == "1,234 files"
    assert inflect(0, "file", "files") == "0 files"


def test_before_after():
    ba = BeforeAfter.start(100)
    ba.stop(90)
    assert ba.less() == 10
    assert ba.less_percent() == pytest.approx(0.1)
    assert ba.more() is None
    assert ba.more_percent() is None


def test_before_after_growth():
    ba = BeforeAfter(50, 75)
    assert ba.more() == 25
    assert ba.more_percent() == pytest.approx(0.5)
    assert ba.less() is None


def test_before_after_zero_is_unset():
    ba = BeforeAfter(0, 10)
    assert ba.before is None
    assert ba.less() is None
    assert ba.more() is None
