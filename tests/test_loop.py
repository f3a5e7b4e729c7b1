"""HotkeyEventLoop tests"""

import os
import signal

import pytest

from fakes import ROOT, F_KEYCODES
from xlayout.core import x11
from xlayout.core import loop as loop_module
from xlayout.core.focus import FocusResolver
from xlayout.core.loop import DispatchResult, HotkeyEventLoop, LoopState, TargetMode
from xlayout.core.system import EventType, KeyEvent
from xlayout.tiling import ColumnLayoutEngine


def ctrl_press(index, state=x11.CONTROL_MASK):
    return KeyEvent(EventType.KEY_PRESS, F_KEYCODES[index], state)


@pytest.fixture
def geometry():
    return ColumnLayoutEngine.build([1, 1, 1], 1200)


@pytest.fixture
def loop(nested_system, geometry):
    loop = HotkeyEventLoop(nested_system, geometry)
    loop.setup(x11.CONTROL_MASK)
    return loop


class TestSetup:
    def test_binds_one_key_per_column(self, system, geometry):
        loop = HotkeyEventLoop(system, geometry)

        assert loop.setup(x11.CONTROL_MASK) == 3
        assert len(system.grabs) == 6
        assert system.key_input_selected
        assert loop.state is LoopState.IDLE


class TestDispatch:
    def test_end_to_end_moves_top_level_window(self, nested_system, loop):
        """F2 with child 0x400 focused moves its top-level 0x200 into column 1"""
        result = loop.handle(KeyEvent(EventType.KEY_PRESS, F_KEYCODES[1], x11.CONTROL_MASK))

        assert result is DispatchResult.MOVED
        assert nested_system.moves == [(0x200, 400, 0, 400, 500)]
        assert loop.state is LoopState.IDLE

    def test_numlock_state_dispatches_the_same(self, nested_system, loop):
        state = x11.CONTROL_MASK | x11.NUMLOCK_MASK
        loop.handle(KeyEvent(EventType.KEY_PRESS, F_KEYCODES[0], state))

        assert nested_system.moves == [(0x200, 0, 0, 400, 500)]

    @pytest.mark.parametrize(
        "state",
        [0, x11.ALT_MASK, x11.CONTROL_MASK | x11.SHIFT_MASK, x11.NUMLOCK_MASK],
    )
    def test_key_without_exact_modifier_ignored(self, nested_system, loop, state):
        """A plain F-key reaching the root through key input is not a hotkey"""
        assert loop.handle(ctrl_press(1, state)) is DispatchResult.IGNORED
        assert nested_system.moves == []

    def test_lock_modifiers_do_not_matter(self, nested_system, loop):
        state = x11.CONTROL_MASK | x11.NUMLOCK_MASK | x11.LOCK_MASK

        assert loop.handle(ctrl_press(1, state)) is DispatchResult.MOVED
        assert nested_system.moves == [(0x200, 400, 0, 400, 500)]

    def test_pointer_button_bits_do_not_matter(self, nested_system, loop):
        button1 = 1 << 8

        assert loop.handle(ctrl_press(0, x11.CONTROL_MASK | button1)) is DispatchResult.MOVED

    def test_zero_width_column_not_applied(self, nested_system):
        geometry = ColumnLayoutEngine.build([1, 10000], 1920)
        assert geometry.geometry_for(0).width == 0
        loop = HotkeyEventLoop(nested_system, geometry)
        loop.setup(x11.CONTROL_MASK)

        assert loop.handle(ctrl_press(0)) is DispatchResult.FAILED
        assert loop.handle(ctrl_press(1)) is DispatchResult.MOVED
        assert nested_system.moves == [(0x200, 0, 0, 1919, 500)]
        assert loop.state is LoopState.IDLE

    def test_key_release_ignored(self, nested_system, loop):
        result = loop.handle(KeyEvent(EventType.KEY_RELEASE, F_KEYCODES[1]))

        assert result is DispatchResult.IGNORED
        assert nested_system.moves == []

    def test_other_events_ignored(self, nested_system, loop):
        assert loop.handle(KeyEvent(EventType.OTHER)) is DispatchResult.IGNORED
        assert nested_system.moves == []

    def test_unbound_key_ignored(self, nested_system, loop):
        result = loop.handle(ctrl_press(5))

        assert result is DispatchResult.IGNORED
        assert nested_system.moves == []

    def test_no_focus_skips(self, nested_system, loop):
        nested_system.focus = None

        assert loop.handle(ctrl_press(2)) is DispatchResult.SKIPPED
        assert nested_system.moves == []
        assert loop.state is LoopState.IDLE

    def test_cycle_is_recovered(self, system, geometry):
        system.add_window(0x10, 0x11)
        system.add_window(0x11, 0x10)
        system.focus = 0x10
        loop = HotkeyEventLoop(system, geometry, resolver=FocusResolver(system, max_depth=4))
        loop.setup(x11.CONTROL_MASK)

        press = ctrl_press(0)
        assert loop.handle(press) is DispatchResult.FAILED
        assert loop.handle(press) is DispatchResult.FAILED
        assert system.moves == []
        assert loop.state is LoopState.IDLE

    def test_vanished_window_is_recovered(self, nested_system, loop):
        del nested_system.heights[0x200]

        result = loop.handle(ctrl_press(0))

        assert result is DispatchResult.FAILED
        assert nested_system.moves == []

    def test_unexpected_error_is_recovered(self, nested_system, loop, monkeypatch):
        def broken(*args):
            raise RuntimeError("boom")

        monkeypatch.setattr(nested_system, "move_resize", broken)

        assert loop.handle(ctrl_press(0)) is DispatchResult.FAILED
        assert loop.state is LoopState.IDLE

    def test_pointer_target(self, nested_system, geometry):
        nested_system.add_window(0x900, ROOT, height=640)
        nested_system.pointer_children = {ROOT: 0x900}
        loop = HotkeyEventLoop(nested_system, geometry, target=TargetMode.POINTER)
        loop.setup(x11.CONTROL_MASK)

        loop.handle(ctrl_press(2))

        assert nested_system.moves == [(0x900, 800, 0, 400, 640)]


class TestRun:
    def test_processes_events_in_order(self, nested_system, loop):
        nested_system.press(0)
        nested_system.release(0)
        nested_system.press(2)

        with pytest.raises(EOFError):
            loop.run(install_signal_handlers=False)

        assert nested_system.moves == [
            (0x200, 0, 0, 400, 500),
            (0x200, 800, 0, 400, 500),
        ]
        assert not loop.is_running
        assert loop.state is LoopState.IDLE

    def test_stop_ends_loop(self, nested_system, loop, monkeypatch):
        nested_system.press(1)
        nested_system.press(2)
        original = nested_system.move_resize

        def move_then_stop(*args):
            original(*args)
            loop.stop()

        monkeypatch.setattr(nested_system, "move_resize", move_then_stop)

        loop.run(install_signal_handlers=False)

        assert len(nested_system.moves) == 1
        assert len(nested_system.events) == 1

    def test_signal_while_starting_restores_handlers(self, nested_system, loop, monkeypatch):
        before = signal.getsignal(signal.SIGTERM)
        log_info = loop_module.log.info

        def info_then_signal(msg, *args):
            log_info(msg, *args)
            if msg.startswith("Event loop running"):
                os.kill(os.getpid(), signal.SIGTERM)

        monkeypatch.setattr(loop_module.log, "info", info_then_signal)
        nested_system.press(0)

        loop.run()

        assert signal.getsignal(signal.SIGTERM) is before
        assert not loop.is_running
        assert nested_system.moves == []
