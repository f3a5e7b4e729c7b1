"""
xlayout.core.system - Windowing-system capability interface.

Everything xlayout needs from the display server goes through the
WindowSystem abstract class: the focus resolver, the hotkey manager and
the event loop only ever see this interface.  x11.X11Session is the real
implementation; the test suite drives the same code with an in-memory
fake.
"""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass
from typing import Optional

# Opaque X window id.  Only meaningful while the session is open.
WindowHandle = int

# X11 "None": no window.
NO_WINDOW: WindowHandle = 0


class WindowGoneError(LookupError):
    """The window was destroyed between two requests."""

    def __init__(self, window: WindowHandle) -> None:
        super().__init__(f"Window {window:#x} no longer exists")
        self.window = window


class KeyGrabError(RuntimeError):
    """A key combination is already grabbed by another client."""

    def __init__(self, keycode: int, modifiers: int) -> None:
        super().__init__(
            f"Keycode {keycode} with modifiers 0x{modifiers:X} is grabbed by another client"
        )
        self.keycode = keycode
        self.modifiers = modifiers


# ============================================================================
# Event / reply types
# ============================================================================
class EventType(enum.Enum):
    """Kinds of notification returned by WindowSystem.next_event()."""
    KEY_PRESS = "key_press"
    KEY_RELEASE = "key_release"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """
    One notification from the display server.

    Attributes:
        type:    The kind of notification.
        keycode: Physical key for key events, 0 otherwise.
        state:   Modifier mask held when the key event happened.
    """

    type: EventType
    keycode: int = 0
    state: int = 0


@dataclass(frozen=True, slots=True)
class ParentInfo:
    """
    Result of a tree query for one window.

    parent is NO_WINDOW when the queried window is the root itself.
    """

    root: WindowHandle
    parent: WindowHandle

    @property
    def is_top_level(self) -> bool:
        return self.parent == self.root


# ============================================================================
# WindowSystem
# ============================================================================
class WindowSystem(abc.ABC):
    """
    Capability interface over a windowing-system session.

    Implementations raise WindowGoneError when a request names a window
    that no longer exists.  A session is a context manager that closes
    itself on exit.
    """

    def __enter__(self) -> WindowSystem:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def close(self) -> None:
        """Close the session.  Safe to call more than once."""
        ...

    @abc.abstractmethod
    def screen_size(self) -> tuple[int, int]:
        """(width, height) of the default screen in pixels."""
        ...

    @property
    @abc.abstractmethod
    def root(self) -> WindowHandle:
        """Root window of the default screen."""
        ...

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def keycode_for(self, keysym: int) -> int:
        """Physical keycode producing *keysym*, or 0 if none does."""
        ...

    @abc.abstractmethod
    def grab_key(self, keycode: int, modifiers: int) -> None:
        """
        Grab *keycode* + *modifiers* on the root window.

        Raises:
            KeyGrabError: If the combination is already grabbed elsewhere.
        """
        ...

    @abc.abstractmethod
    def ungrab_key(self, keycode: int, modifiers: int) -> None:
        """Release a grab made by grab_key()."""
        ...

    @abc.abstractmethod
    def select_key_input(self) -> None:
        """Ask for key press/release notifications on the root window."""
        ...

    @abc.abstractmethod
    def next_event(self) -> KeyEvent:
        """Block until the next notification arrives."""
        ...

    # ------------------------------------------------------------------
    # Window tree
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def get_input_focus(self) -> Optional[WindowHandle]:
        """Window holding input focus, or None/NO_WINDOW if there is none."""
        ...

    @abc.abstractmethod
    def get_parent(self, window: WindowHandle) -> ParentInfo:
        """Root and parent of *window*."""
        ...

    @abc.abstractmethod
    def query_pointer_child(self, window: WindowHandle) -> WindowHandle:
        """Child of *window* under the pointer, or NO_WINDOW."""
        ...

    # ------------------------------------------------------------------
    # Attributes / placement
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def get_height(self, window: WindowHandle) -> int:
        """Current height of *window* in pixels."""
        ...

    @abc.abstractmethod
    def get_window_name(self, window: WindowHandle) -> str:
        """Title of *window*, or an empty string."""
        ...

    @abc.abstractmethod
    def move_resize(
        self,
        window: WindowHandle,
        x: int,
        y: int,
        width: int,
        height: int,
    ) -> None:
        """Request *window* to be moved and resized."""
        ...
