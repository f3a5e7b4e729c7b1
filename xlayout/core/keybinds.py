"""
xlayout.core.keybinds - Column hotkeys.

Binds function keys F1..FK to column indices 0..K-1 by grabbing them on
the root window.  Each key is grabbed twice: under the configured
modifier, and under the same modifier plus NumLock, because X delivers
a grab only when the held modifiers match exactly.

The HotkeyManager:
    1. Resolves each function key to the physical keycode.
    2. Registers the grabs through the WindowSystem.
    3. Maps a pressed keycode back to its column index.
    4. Releases all grabs on shutdown.

Typical use:
    hk = HotkeyManager(session)
    hk.bind_columns(3, x11.CONTROL_MASK)
    index = hk.index_for(event.keycode)
    ...
    hk.unregister_all()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from xlayout.core import x11
from xlayout.core.combo_parser import modifiers_to_str
from xlayout.core.system import KeyGrabError, WindowSystem

log = logging.getLogger(__name__)

# Lock modifiers that may be held on top of a binding without changing it
_LOCK_MASKS = x11.NUMLOCK_MASK | x11.LOCK_MASK


@dataclass(frozen=True, slots=True)
class Hotkey:
    """A function key bound to one column."""

    index: int
    keysym: int
    keycode: int
    modifiers: int

    @property
    def description(self) -> str:
        return f"{modifiers_to_str(self.modifiers)}+F{self.index + 1}"

    @property
    def grab_masks(self) -> tuple[int, ...]:
        """Every modifier mask this key is grabbed under."""
        if self.modifiers & x11.NUMLOCK_MASK:
            return (self.modifiers,)
        return (self.modifiers, self.modifiers | x11.NUMLOCK_MASK)

    def matches(self, state: int) -> bool:
        """
        True if the modifier *state* of a key event selects this binding.

        NumLock and CapsLock are ignored, every other modifier must match.
        """
        held = state & x11.MODIFIER_STATE_MASK & ~_LOCK_MASKS
        return held == self.modifiers & ~_LOCK_MASKS


class HotkeyManager:
    """
    Owns the function-key grabs of one session.

    Bindings are established once at startup and never change.
    """

    def __init__(self, system: WindowSystem) -> None:
        self._system = system
        # keycode -> Hotkey
        self._hotkeys: dict[int, Hotkey] = {}

    @property
    def count(self) -> int:
        """Number of bound columns."""
        return len(self._hotkeys)

    @property
    def hotkeys(self) -> list[Hotkey]:
        """All bound hotkeys, ordered by column index."""
        return sorted(self._hotkeys.values(), key=lambda hk: hk.index)

    def bind_columns(self, count: int, modifiers: int) -> int:
        """
        Grab F1..F(count) under *modifiers* (and with NumLock).

        Returns:
            The number of columns bound successfully.
        """
        bound = 0
        for index in range(count):
            if self.register(index, modifiers) is not None:
                bound += 1
        return bound

    def register(self, index: int, modifiers: int) -> Optional[Hotkey]:
        """
        Bind function key F(index + 1) to column *index*.

        Returns:
            The Hotkey, or None if the key does not exist on this keyboard
            or another client already grabbed it.
        """
        keysym = x11.function_keysym(index)
        keycode = self._system.keycode_for(keysym)

        if not keycode:
            log.error(
                "Failed to bind %s+F%d: no keycode for keysym 0x%X",
                modifiers_to_str(modifiers),
                index + 1,
                keysym,
            )
            return None

        hotkey = Hotkey(
            index=index,
            keysym=keysym,
            keycode=keycode,
            modifiers=modifiers,
        )
        grabbed: list[int] = []
        try:
            for mask in hotkey.grab_masks:
                self._system.grab_key(keycode, mask)
                grabbed.append(mask)
        except KeyGrabError as e:
            for mask in grabbed:
                self._system.ungrab_key(keycode, mask)
            log.error("Failed to bind %s: %s", hotkey.description, e)
            return None

        self._hotkeys[keycode] = hotkey
        log.info(
            "Hotkey registered: column=%d keycode=%d %s",
            index,
            keycode,
            hotkey.description,
        )
        return hotkey

    def hotkey_for(self, keycode: int) -> Optional[Hotkey]:
        """Hotkey bound to *keycode*, or None."""
        return self._hotkeys.get(keycode)

    def index_for(self, keycode: int) -> Optional[int]:
        """Column index bound to *keycode*, or None if it is not bound."""
        hotkey = self._hotkeys.get(keycode)
        return hotkey.index if hotkey is not None else None

    def unregister_all(self) -> None:
        """Release every grab.  Call this on shutdown."""
        for hotkey in self._hotkeys.values():
            for mask in hotkey.grab_masks:
                self._system.ungrab_key(hotkey.keycode, mask)
        count = len(self._hotkeys)
        self._hotkeys.clear()
        log.info("All hotkeys unregistered (%d total)", count)

    def dump_state(self) -> str:
        """Return a formatted string of all bound hotkeys."""
        lines = [
            f"=== HotkeyManager: {len(self._hotkeys)} hotkeys ===",
            "",
        ]
        for hk in self.hotkeys:
            lines.append(
                f"  column={hk.index:2d}  keycode={hk.keycode:3d}  {hk.description}"
            )
        return "\n".join(lines)
