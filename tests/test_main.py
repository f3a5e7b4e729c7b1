"""Command-line entry point tests"""

import os
import signal

import pytest

from fakes import FakeWindowSystem, ROOT
from xlayout import __main__ as cli
from xlayout.core import x11


@pytest.fixture
def opened(monkeypatch):
    """Replace the X connection with a fake and record open() calls."""
    calls = []
    fake = FakeWindowSystem(width=1200, height=800)

    def fake_open(name=None):
        calls.append(name)
        return fake

    monkeypatch.setattr(x11.X11Session, "open", fake_open)
    return fake, calls


class TestArguments:
    @pytest.mark.parametrize(
        "argv",
        [
            [],
            ["1", "0", "2"],
            ["1", "-3"],
            ["one"],
            ["1_000", "1"],
            ["1"] * 13,
            ["--modifier", "hyper", "1"],
            ["--target", "mouse", "1"],
        ],
    )
    def test_bad_arguments_exit_before_connecting(self, opened, argv):
        _, calls = opened

        with pytest.raises(SystemExit) as exc_info:
            cli.main(argv)

        assert exc_info.value.code != 0
        assert calls == []


class TestStartup:
    def test_connection_failure(self, monkeypatch):
        def refuse(name=None):
            raise x11.DisplayConnectionError("Unable to open display :99")

        monkeypatch.setattr(x11.X11Session, "open", refuse)

        assert cli.main(["1", "1"]) == cli.EXIT_FAILURE

    def test_signal_shuts_down_cleanly(self, opened):
        fake, calls = opened
        fake.add_window(0x200, ROOT, height=500)
        fake.focus = 0x200
        fake.press(1)

        def terminate():
            if fake.events:
                return fake.events.popleft()
            os.kill(os.getpid(), signal.SIGTERM)
            raise AssertionError("signal handler did not stop the loop")

        fake.next_event = terminate

        assert cli.main(["--display", ":1", "1", "1", "1"]) == cli.EXIT_OK
        assert calls == [":1"]
        assert fake.moves == [(0x200, 400, 0, 400, 500)]
        assert sorted(fake.ungrabs) == sorted(fake.grabs)
        assert fake.closed == 1

    def test_modifier_option(self, opened):
        fake, _ = opened

        assert cli.main(["-m", "super+shift", "2", "1"]) == cli.EXIT_FAILURE

        mask = x11.SUPER_MASK | x11.SHIFT_MASK
        assert (67, mask) in fake.grabs
        assert (67, mask | x11.NUMLOCK_MASK) in fake.grabs

    def test_display_failure_mid_run_closes_session(self, opened):
        fake, _ = opened

        assert cli.main(["1"]) == cli.EXIT_FAILURE
        assert fake.closed == 1
        assert fake.ungrabs
