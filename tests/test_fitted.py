import pytest

from progless import fitted

BJORK = "Björk Guðmundsdóttir".encode()


def test_width_ascii():
    assert fitted.width(b"Hello World") == 11
    assert fitted.width(b"") == 0


def test_width_unicode():
    assert fitted.width(BJORK) == 20
    assert fitted.width("你好".encode()) == 4


def test_width_ignores_ansi_and_controls():
    assert fitted.width(b"\x1b[2mHello\x1b[0m World") == 11
    assert fitted.width(b"Hello\nWorld") == 10
    assert fitted.width("\x1b[1;91mBjörk\x1b[0m".encode()) == 5


@pytest.mark.parametrize(
    "data,stop,expected",
    [
        (BJORK, 5, 6),
        (BJORK, 3, 4),
        (BJORK, 2, 2),
        (BJORK, 0, 0),
        (BJORK, 100, len(BJORK)),
        (b"\x1b[2mHello\x1b[0m World", 5, 13),
        (b"Hello\nWorld", 10, 11),
        (b"Hello World", 5, 5),
    ],
)
def test_length_width(data, stop, expected):
    assert fitted.length_width(data, stop) == expected


@pytest.mark.parametrize("stop", range(0, 10))
def test_double_width_fit(stop):
    data = "你好世界".encode()
    out = fitted.fit(data, stop)
    w = fitted.width(out)
    assert w <= stop
    assert w >= stop - 1
    # Never splits a character
    out.decode()


@pytest.mark.parametrize("k", [1, 2, 5])
def test_double_width_fits_iff_budget_allows(k):
    data = ("界" * k).encode()
    for w in range(0, 2 * k + 2):
        assert (fitted.length_width(data, w) == len(data)) == (2 * k <= w)


def test_invalid_utf8_does_not_raise():
    data = b"abc\xff\xfedef"
    assert fitted.width(data) == 3 + 5
    assert fitted.length_width(data, 4) == 3


def test_strip_ansi():
    assert fitted.strip_ansi(b"\x1b[1;35mHi\x1b[0m there") == b"Hi there"
    assert fitted.strip_ansi(b"plain") == b"plain"
