"""
xlayout.core.loop - HotkeyEventLoop: the blocking event loop.

Waits for key presses on the grabbed function keys and snaps the
target window into the matching column:

    1. keycode -> column index (HotkeyManager)
    2. target window (FocusResolver, focused or under-pointer)
    3. current height of the target
    4. column geometry (ColumnGeometry)
    5. one move/resize request: (offset, 0, width, height)

The loop has two states, IDLE and DISPATCHING, and handles one event
at a time.  Errors raised while dispatching are logged and the loop
goes back to IDLE.  Only stop(), a signal or a failing next_event()
ends the loop.
"""

from __future__ import annotations

import enum
import logging
import signal

from xlayout.core.focus import FocusResolver, TreeTraversalOverflow
from xlayout.core.keybinds import HotkeyManager
from xlayout.core.system import (
    NO_WINDOW,
    EventType,
    KeyEvent,
    WindowGoneError,
    WindowHandle,
    WindowSystem,
)
from xlayout.tiling.columns import ColumnGeometry, LayoutError

log = logging.getLogger(__name__)


# ============================================================================
# Enums
# ============================================================================
class LoopState(enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"


class TargetMode(enum.Enum):
    """Which window a hotkey acts on."""
    FOCUS = "focus"
    POINTER = "pointer"


class DispatchResult(enum.Enum):
    """Outcome of handling one event."""

    # Not a key press, or a key that is not bound.
    IGNORED = "ignored"

    # Bound key, but no target window.
    SKIPPED = "skipped"

    # A move/resize request was issued.
    MOVED = "moved"

    # Dispatch raised and was recovered.
    FAILED = "failed"


class _LoopInterrupted(BaseException):
    """Raised from a signal handler to leave the blocking event wait."""


# ============================================================================
# HotkeyEventLoop
# ============================================================================
class HotkeyEventLoop:
    """
    Connects column hotkeys to window placement.

    Usage:
        loop = HotkeyEventLoop(session, geometry)
        loop.setup(x11.CONTROL_MASK)
        loop.run()   # blocks until stop() or a fatal display error
    """

    def __init__(
        self,
        system: WindowSystem,
        geometry: ColumnGeometry,
        resolver: FocusResolver | None = None,
        hotkeys: HotkeyManager | None = None,
        target: TargetMode = TargetMode.FOCUS,
    ) -> None:
        self._system = system
        self._geometry = geometry
        self._resolver = resolver if resolver is not None else FocusResolver(system)
        self._hotkeys = hotkeys if hotkeys is not None else HotkeyManager(system)
        self._target = target
        self._state = LoopState.IDLE
        self._running = False

        # Traversal overflows are reported once, then only at debug level.
        self._overflow_reported = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def target(self) -> TargetMode:
        return self._target

    @property
    def hotkeys(self) -> HotkeyManager:
        return self._hotkeys

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def setup(self, modifiers: int) -> int:
        """
        Grab one function key per column and select key input on the root.

        Returns:
            Number of columns bound.
        """
        bound = self._hotkeys.bind_columns(self._geometry.count, modifiers)
        self._system.select_key_input()
        if bound < self._geometry.count:
            log.warning(
                "Only %d of %d column hotkeys could be bound",
                bound,
                self._geometry.count,
            )
        return bound

    def run(self, install_signal_handlers: bool = True) -> None:
        """
        Block on the display and handle events until stop() is called.

        With install_signal_handlers, SIGINT and SIGTERM stop the loop
        even while it is blocked waiting for the next event.
        """
        previous: dict[int, object] = {}

        def _signal_handler(sig: int, frame: object) -> None:
            log.info("Signal %d received, stopping...", sig)
            self.stop()
            raise _LoopInterrupted()

        try:
            if install_signal_handlers:
                for sig in (signal.SIGINT, signal.SIGTERM):
                    previous[sig] = signal.signal(sig, _signal_handler)

            self._running = True
            log.info("Event loop running (target=%s)", self._target.value)
            while self._running:
                self.handle(self._system.next_event())
        except _LoopInterrupted:
            pass
        finally:
            self._running = False
            self._state = LoopState.IDLE
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def stop(self) -> None:
        """Request the loop to exit after the current event."""
        if self._running:
            log.info("Stop requested")
        self._running = False

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def handle(self, event: KeyEvent) -> DispatchResult:
        """Handle a single notification synchronously."""
        if event.type is not EventType.KEY_PRESS:
            return DispatchResult.IGNORED

        hotkey = self._hotkeys.hotkey_for(event.keycode)
        if hotkey is None:
            log.debug("Ignoring unbound keycode %d", event.keycode)
            return DispatchResult.IGNORED
        if not hotkey.matches(event.state):
            log.debug(
                "Ignoring keycode %d with modifier state 0x%X", event.keycode, event.state
            )
            return DispatchResult.IGNORED
        index = hotkey.index

        self._state = LoopState.DISPATCHING
        try:
            return self._dispatch(index)
        except TreeTraversalOverflow as e:
            if self._overflow_reported:
                log.debug("%s", e)
            else:
                log.warning("%s", e)
                self._overflow_reported = True
            return DispatchResult.FAILED
        except (WindowGoneError, LayoutError) as e:
            log.warning("Column %d: %s", index, e)
            return DispatchResult.FAILED
        except Exception:
            log.exception("Error while moving window to column %d", index)
            return DispatchResult.FAILED
        finally:
            self._state = LoopState.IDLE

    def _dispatch(self, index: int) -> DispatchResult:
        window = self._resolve_target()
        if window == NO_WINDOW:
            log.debug("Column %d: no target window, skipping", index)
            return DispatchResult.SKIPPED

        height = self._system.get_height(window)
        rect = self._geometry.rect_for(index, height)
        if rect.w <= 0:
            log.warning(
                "Column %d is 0px wide on this screen, not moving window %#x",
                index,
                window,
            )
            return DispatchResult.FAILED

        log.info(
            "Column %d: window %#x %r -> %s",
            index,
            window,
            self._system.get_window_name(window),
            rect,
        )
        self._system.move_resize(window, *rect.to_xywh())
        return DispatchResult.MOVED

    def _resolve_target(self) -> WindowHandle:
        if self._target is TargetMode.POINTER:
            return self._resolver.top_level_under_pointer()
        return self._resolver.top_level_of_focus()
