import pytest

from progless.errors import EmptyTaskError, ProglessError, TaskOverflowError
from progless.task import Task


def test_task_line():
    buf = bytearray()
    Task("resize foo.png").push_to(buf, 80)
    assert bytes(buf) == "    ↳ resize foo.png\n".encode()


def test_task_line_cropped():
    buf = bytearray()
    Task("abcdefghij").push_to(buf, 10)
    assert bytes(buf) == "    ↳ abcd\n".encode()


def test_task_line_strips_ansi():
    buf = bytearray()
    Task(b"\x1b[1mbold\x1b[0m").push_to(buf, 80)
    assert bytes(buf) == "    ↳ bold\n".encode()


def test_task_line_no_room():
    buf = bytearray()
    Task("abc").push_to(buf, 6)
    assert buf == b""


def test_task_errors():
    with pytest.raises(EmptyTaskError):
        Task("")
    with pytest.raises(TaskOverflowError):
        Task("x" * 65_536)
    assert issubclass(TaskOverflowError, ProglessError)
    assert issubclass(ProglessError, ValueError)


def test_task_equality():
    assert Task("a") == Task(b"a")
    assert Task("a") != Task("b")
    assert len({Task("a"), Task("a")}) == 1
