"""
xlayout.core.focus - Resolve the top-level window to act on.

Input focus frequently lands on a nested child (a text widget inside a
toolkit frame inside a window-manager decoration).  What xlayout moves
is the top-level window: the ancestor whose parent is the root window.

The upward walk is bounded by max_depth.  A well-behaved server never
reports a cycle, but a walk that never reaches the root raises
TreeTraversalOverflow instead of spinning forever.
"""

from __future__ import annotations

import logging

from xlayout.core.system import NO_WINDOW, WindowHandle, WindowSystem

log = logging.getLogger(__name__)


DEFAULT_MAX_DEPTH = 64


class TreeTraversalOverflow(RuntimeError):
    """The window tree walk exceeded the maximum depth."""

    def __init__(self, start: WindowHandle, max_depth: int) -> None:
        super().__init__(
            f"No top-level ancestor of window {start:#x} within {max_depth} levels"
        )
        self.start = start
        self.max_depth = max_depth


class FocusResolver:
    """
    Finds the top-level window for the focused window or for the
    window under the pointer.

    Results are never cached: every call queries the server again.
    """

    def __init__(self, system: WindowSystem, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        self._system = system
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------
    def top_level_of_focus(self) -> WindowHandle:
        """
        Return the top-level ancestor of the focused window.

        Returns NO_WINDOW when nothing has focus.

        Raises:
            TreeTraversalOverflow: If no top-level ancestor is found
                within max_depth steps.
            WindowGoneError: If a window vanished during the walk.
        """
        focused = self._system.get_input_focus()
        if not focused or focused == self._system.root:
            log.debug("No window has input focus")
            return NO_WINDOW

        return self.top_level_of(focused)

    def top_level_under_pointer(self) -> WindowHandle:
        """
        Return the top-level ancestor of the deepest window under the pointer.

        Returns NO_WINDOW when the pointer is over the bare root window.
        """
        window = self._system.root
        child = self._system.query_pointer_child(window)
        depth = 0

        while child:
            depth += 1
            if depth > self._max_depth:
                raise TreeTraversalOverflow(self._system.root, self._max_depth)
            window = child
            child = self._system.query_pointer_child(window)

        if window == self._system.root:
            log.debug("Pointer is over the root window")
            return NO_WINDOW

        return self.top_level_of(window)

    def top_level_of(self, window: WindowHandle) -> WindowHandle:
        """Walk up from *window* until the parent is the root."""
        candidate = window

        for _ in range(self._max_depth):
            info = self._system.get_parent(candidate)
            if info.is_top_level or not info.parent:
                # No parent: *candidate* is a root itself
                log.debug("Top-level of %#x is %#x", window, candidate)
                return candidate
            candidate = info.parent

        raise TreeTraversalOverflow(window, self._max_depth)
