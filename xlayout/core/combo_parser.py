"""
xlayout.core.combo_parser - Modifier combo parser.

Converts human-readable strings like "ctrl+alt" into the X modifier
mask that the column hotkeys are grabbed under.

Features:
    - Aliases: ctrl = control, alt = mod1 = meta, super = win = mod4.
    - Case-insensitive: "Ctrl+Alt" == "ctrl+alt".
    - Validation: clear error on unknown or duplicate modifiers.
"""

from __future__ import annotations

import logging

from xlayout.core import x11

log = logging.getLogger(__name__)


# ============================================================================
# Modifier aliases -> modifier mask
# ============================================================================
_MODIFIER_MAP: dict[str, int] = {
    "ctrl": x11.CONTROL_MASK,
    "control": x11.CONTROL_MASK,
    "shift": x11.SHIFT_MASK,
    "alt": x11.ALT_MASK,
    "meta": x11.ALT_MASK,
    "mod1": x11.ALT_MASK,
    "super": x11.SUPER_MASK,
    "win": x11.SUPER_MASK,
    "mod4": x11.SUPER_MASK,
}

# Display order and names used by modifiers_to_str()
_MODIFIER_NAMES: list[tuple[int, str]] = [
    (x11.SUPER_MASK, "Super"),
    (x11.CONTROL_MASK, "Ctrl"),
    (x11.ALT_MASK, "Alt"),
    (x11.SHIFT_MASK, "Shift"),
    (x11.NUMLOCK_MASK, "NumLock"),
]


# ============================================================================
# Public API
# ============================================================================

class ComboParseError(ValueError):
    """Raised when a modifier combo string cannot be parsed."""
    pass


def parse_modifiers(combo: str) -> int:
    """
    Parse a modifier combo string into an X modifier mask.

    Args:
        combo: Human-readable combo like "ctrl", "ctrl+alt", "super+shift".
               Case-insensitive. Parts separated by '+'.

    Returns:
        The OR of the modifier masks.

    Raises:
        ComboParseError: If the combo is empty, contains unknown tokens,
                         or repeats a modifier.
    """
    if not combo or not combo.strip():
        raise ComboParseError("Empty modifier combo")

    parts = [p.strip().lower() for p in combo.split("+")]
    parts = [p for p in parts if p]

    if not parts:
        raise ComboParseError(f"No valid parts in combo: {combo!r}")

    modifiers = 0
    for part in parts:
        mask = _MODIFIER_MAP.get(part)
        if mask is None:
            raise ComboParseError(
                f"Unknown modifier: {part!r} in combo: {combo!r}"
            )
        if modifiers & mask:
            raise ComboParseError(
                f"Duplicate modifier {part!r} in combo: {combo!r}"
            )
        modifiers |= mask

    return modifiers


def modifiers_to_str(modifiers: int) -> str:
    """Convert a modifier mask to a human-readable string for logging."""
    parts = [name for mask, name in _MODIFIER_NAMES if modifiers & mask]
    return "+".join(parts) if parts else "None"
