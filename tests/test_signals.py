import io
import signal

import pytest

from progless import fitted, progress, signals
from progless.progress import Progress
from progless.signals import SigintController, SigintPolicy


@pytest.fixture(autouse=True)
def restore_sigint(monkeypatch):
    previous = signal.getsignal(signal.SIGINT)
    monkeypatch.setattr(signals, "_installed", None)
    yield
    signal.signal(signal.SIGINT, previous)


def test_two_strike_first_strike():
    c = SigintController(SigintPolicy.TWO_STRIKE).install()
    assert not c
    c.handle(signal.SIGINT, None)
    assert c.killed
    assert c
    # The second strike would go to the default handler
    assert signal.getsignal(signal.SIGINT) == signal.SIG_DFL


def test_keepalive_keeps_handler():
    c = SigintController(SigintPolicy.KEEPALIVE).install()
    c.handle(signal.SIGINT, None)
    c.handle(signal.SIGINT, None)
    assert c.killed
    assert signal.getsignal(signal.SIGINT) == c.handle


def test_uninstall_restores_previous():
    before = signal.getsignal(signal.SIGINT)
    c = SigintController().install()
    assert signal.getsignal(signal.SIGINT) == c.handle
    c.uninstall()
    assert signal.getsignal(signal.SIGINT) == before


def test_first_registration_wins():
    first = signals.sigint_keepalive()
    assert signals.installed() is first
    assert signals.sigint_two_strike() is first
    assert signals.sigint_default() is first
    assert first.policy is SigintPolicy.KEEPALIVE
    first.uninstall()
    assert signals.installed() is None


def test_progress_picks_up_interrupt(monkeypatch):
    monkeypatch.setattr(progress, "term_width", lambda stream=None: 80)
    out = io.BytesIO()
    c = signals.sigint_keepalive()
    p = Progress(10, stream=out)
    p.tick(force=True)
    assert b"Early shutdown" not in out.getvalue()

    c.handle(signal.SIGINT, None)
    p.tick(force=True)
    assert b"Warning: Early shutdown in progress." in fitted.strip_ansi(out.getvalue())
    # Work may carry on
    assert p.running
    p.increment()
    assert p.done == 1
