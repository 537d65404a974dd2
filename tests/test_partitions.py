import random

import pytest

from progless.partitions import MAX_PARTS, PartitionTable, RenderBuffer


def make_buffer():
    return RenderBuffer(b"AA__BB__CC", [(0, 2), (4, 6), (8, 10)])


def test_replace_grow_middle():
    buf = make_buffer()
    assert buf.replace(1, b"XXXX")
    assert bytes(buf) == b"AA__XXXX__CC"
    assert buf.table.partitions() == [(0, 2), (4, 8), (10, 12)]


def test_replace_shrink_middle():
    buf = make_buffer()
    assert buf.replace(1, b"")
    assert bytes(buf) == b"AA____CC"
    assert buf.table.partitions() == [(0, 2), (4, 4), (6, 8)]
    assert buf.table.is_empty(1)


def test_replace_shrink_last():
    buf = make_buffer()
    buf.replace(2, b"C")
    assert bytes(buf) == b"AA__BB__C"
    assert buf.table.partitions() == [(0, 2), (4, 6), (8, 9)]


def test_replace_same_content_is_noop():
    buf = make_buffer()
    assert not buf.replace(1, b"BB")
    assert bytes(buf) == b"AA__BB__CC"
    assert buf.table.partitions() == [(0, 2), (4, 6), (8, 10)]


def test_extend_and_truncate():
    buf = make_buffer()
    buf.extend(0, b"Z")
    assert bytes(buf) == b"AAZ__BB__CC"
    assert buf.get(0) == b"AAZ"
    assert buf.table.partitions() == [(0, 3), (5, 7), (9, 11)]

    buf.truncate(1, 1)
    assert bytes(buf) == b"AAZ__B__CC"
    assert buf.get(1) == b"B"

    # Truncating to a longer length does nothing
    buf.truncate(1, 5)
    assert buf.get(1) == b"B"


def test_write_at():
    buf = make_buffer()
    buf.write_at(2, b"ZZ")
    assert bytes(buf) == b"AA__BB__ZZ"
    with pytest.raises(ValueError):
        buf.write_at(2, b"ZZZ")


def test_clear():
    buf = make_buffer()
    buf.clear()
    assert buf.total_len() == 0
    assert buf.table.partitions() == [(0, 0), (0, 0), (0, 0)]


def test_count_and_equality():
    buf = RenderBuffer(b"a\nb\n", [(0, 1), (2, 3)])
    assert buf.count(b"\n") == 2
    assert buf == b"a\nb\n"
    assert buf == RenderBuffer(b"a\nb\n", [(0, 1), (2, 3)])


@pytest.mark.parametrize(
    "bounds",
    [
        [0, 2, 1, 3],  # overlapping
        [4, 2],  # reversed
        [0, 2, 4],  # odd count
        [0, 20],  # past the end
    ],
)
def test_invalid_bounds(bounds):
    with pytest.raises(ValueError):
        RenderBuffer(b"0123456789", bounds)


def test_too_many_partitions():
    with pytest.raises(ValueError):
        PartitionTable([0, 0] * (MAX_PARTS + 1))


def test_table_accessors():
    toc = PartitionTable([0, 2, 4, 6])
    assert len(toc) == 2
    assert toc.start(1) == 4
    assert toc.end(1) == 6
    assert toc.length(0) == 2
    assert toc.range(1) == slice(4, 6)


def test_random_replacements_keep_literals():
    """Literal bytes between fields survive any sequence of replacements."""
    rng = random.Random(1234)
    buf = RenderBuffer(b"<>|<>|<>|", [(1, 1), (4, 4), (7, 7)])
    expected = [b"", b"", b""]

    for _ in range(500):
        idx = rng.randrange(3)
        data = bytes(rng.choice(b"abcdef") for _ in range(rng.randrange(8)))
        buf.replace(idx, data)
        expected[idx] = data

        parts = buf.table.partitions()
        assert bytes(buf) == b"<" + expected[0] + b">|<" + expected[1] + b">|<" + expected[2] + b">|"
        assert [buf.get(i) for i in range(3)] == expected
        prev = 0
        for start, end in parts:
            assert prev <= start <= end
            prev = end
        assert buf.total_len() == sum(len(d) for d in expected) + 9


@pytest.mark.parametrize("idx", [0, 1, 2])
def test_negative_resize_leaves_buffer_untouched(idx):
    buf = make_buffer()
    with pytest.raises(ValueError):
        buf.resize(idx, -1)
    assert bytes(buf) == b"AA__BB__CC"
    assert buf.table.partitions() == [(0, 2), (4, 6), (8, 10)]
