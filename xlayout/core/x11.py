"""
xlayout.core.x11 - X11 bindings via python-xlib.

Centralizes all Xlib calls used by xlayout so that no other module
needs to import Xlib directly.  X11Session implements the WindowSystem
interface on top of a single Xlib display connection.
"""

from __future__ import annotations

import logging
from typing import Optional

import Xlib.display
import Xlib.error
import Xlib.X
import Xlib.XK

from xlayout.core.system import (
    NO_WINDOW,
    EventType,
    KeyEvent,
    KeyGrabError,
    ParentInfo,
    WindowGoneError,
    WindowHandle,
    WindowSystem,
)

log = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================

# Modifier masks
SHIFT_MASK = Xlib.X.ShiftMask
CONTROL_MASK = Xlib.X.ControlMask
ALT_MASK = Xlib.X.Mod1Mask
NUMLOCK_MASK = Xlib.X.Mod2Mask
SUPER_MASK = Xlib.X.Mod4Mask
LOCK_MASK = Xlib.X.LockMask

# Bits of an event state that are keyboard modifiers (pointer buttons excluded)
MODIFIER_STATE_MASK = (
    Xlib.X.ShiftMask | Xlib.X.LockMask | Xlib.X.ControlMask | Xlib.X.Mod1Mask
    | Xlib.X.Mod2Mask | Xlib.X.Mod3Mask | Xlib.X.Mod4Mask | Xlib.X.Mod5Mask
)

# Function key keysyms are contiguous: XK_F2 == XK_F1 + 1, ...
XK_F1 = Xlib.XK.XK_F1

# Special values the server may report as the focus window
_FOCUS_NONE_VALUES = (Xlib.X.NONE, Xlib.X.PointerRoot)

# Errors meaning "the window id is stale"
_GONE_ERRORS = (Xlib.error.BadWindow, Xlib.error.BadDrawable)


class DisplayConnectionError(ConnectionError):
    """The X display could not be opened."""


def function_keysym(index: int) -> int:
    """Keysym of function key F(index + 1)."""
    return XK_F1 + index


def _window_id(value) -> WindowHandle:
    """Xlib replies hold either a Window resource or a bare int for None."""
    return getattr(value, "id", value) or NO_WINDOW


# ============================================================================
# X11Session
# ============================================================================
class X11Session(WindowSystem):
    """
    One open connection to an X server.

    Usage:
        with X11Session.open() as session:
            width, height = session.screen_size()
            ...
    """

    def __init__(self, display: Xlib.display.Display) -> None:
        self._display = display
        self._screen = display.screen()
        self._root = self._screen.root
        self._closed = False

        # Requests such as ConfigureWindow fail asynchronously; route the
        # errors to the log instead of python-xlib's stderr printout.
        self._display.set_error_handler(self._on_async_error)

    @classmethod
    def open(cls, name: Optional[str] = None) -> X11Session:
        """
        Connect to the display *name* (defaults to $DISPLAY).

        Raises:
            DisplayConnectionError: If the server cannot be reached.
        """
        try:
            display = Xlib.display.Display(name)
        except (Xlib.error.DisplayError, ConnectionError, OSError) as e:
            raise DisplayConnectionError(
                f"Unable to open display {name or '$DISPLAY'!s}: {e}"
            ) from e

        log.debug("Connected to display %s", display.get_display_name())
        return cls(display)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._display.close()
        log.debug("Display connection closed")

    def screen_size(self) -> tuple[int, int]:
        return (self._screen.width_in_pixels, self._screen.height_in_pixels)

    @property
    def root(self) -> WindowHandle:
        return self._root.id

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------
    def keycode_for(self, keysym: int) -> int:
        return self._display.keysym_to_keycode(keysym)

    def grab_key(self, keycode: int, modifiers: int) -> None:
        # BadAccess arrives asynchronously; sync so it is caught here.
        catch = Xlib.error.CatchError(Xlib.error.BadAccess)
        self._root.grab_key(
            keycode,
            modifiers,
            True,
            Xlib.X.GrabModeAsync,
            Xlib.X.GrabModeAsync,
            onerror=catch,
        )
        self._display.sync()
        if catch.get_error():
            raise KeyGrabError(keycode, modifiers)

    def ungrab_key(self, keycode: int, modifiers: int) -> None:
        self._root.ungrab_key(keycode, modifiers)

    def select_key_input(self) -> None:
        self._root.change_attributes(
            event_mask=Xlib.X.KeyPressMask | Xlib.X.KeyReleaseMask
        )
        self._display.flush()

    def next_event(self) -> KeyEvent:
        event = self._display.next_event()

        if event.type == Xlib.X.KeyPress:
            return KeyEvent(EventType.KEY_PRESS, event.detail, event.state)
        if event.type == Xlib.X.KeyRelease:
            return KeyEvent(EventType.KEY_RELEASE, event.detail, event.state)
        return KeyEvent(EventType.OTHER)

    # ------------------------------------------------------------------
    # Window tree
    # ------------------------------------------------------------------
    def get_input_focus(self) -> Optional[WindowHandle]:
        focus = self._display.get_input_focus().focus
        if isinstance(focus, int) and focus in _FOCUS_NONE_VALUES:
            return NO_WINDOW
        return _window_id(focus)

    def get_parent(self, window: WindowHandle) -> ParentInfo:
        try:
            tree = self._window(window).query_tree()
        except _GONE_ERRORS:
            raise WindowGoneError(window) from None

        # The reply also carries the child list; it is freed with the reply.
        return ParentInfo(root=_window_id(tree.root), parent=_window_id(tree.parent))

    def query_pointer_child(self, window: WindowHandle) -> WindowHandle:
        try:
            pointer = self._window(window).query_pointer()
        except _GONE_ERRORS:
            raise WindowGoneError(window) from None

        if not pointer.same_screen:
            return NO_WINDOW
        return _window_id(pointer.child)

    # ------------------------------------------------------------------
    # Attributes / placement
    # ------------------------------------------------------------------
    def get_height(self, window: WindowHandle) -> int:
        try:
            return self._window(window).get_geometry().height
        except _GONE_ERRORS:
            raise WindowGoneError(window) from None

    def get_window_name(self, window: WindowHandle) -> str:
        win = self._window(window)
        try:
            prop = win.get_full_property(
                self._display.intern_atom("_NET_WM_NAME"),
                self._display.intern_atom("UTF8_STRING"),
            )
            if prop is not None and prop.value:
                value = prop.value
                return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else str(value)
            name = win.get_wm_name()
        except _GONE_ERRORS:
            raise WindowGoneError(window) from None

        if isinstance(name, bytes):
            return name.decode("latin-1", errors="replace")
        return name or ""

    def move_resize(
        self,
        window: WindowHandle,
        x: int,
        y: int,
        width: int,
        height: int,
    ) -> None:
        self._window(window).configure(x=x, y=y, width=width, height=height)
        self._display.flush()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _window(self, window: WindowHandle):
        return self._display.create_resource_object("window", window)

    @staticmethod
    def _on_async_error(error, request) -> None:
        log.warning("X error: %s", error)
