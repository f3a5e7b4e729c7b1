"""
xlayout.core - Window system access, focus resolution and hotkeys.

This package contains:
    - system       : WindowSystem capability interface and event types
    - x11          : python-xlib bindings (X11Session)
    - focus        : FocusResolver - top-level window of the focus/pointer
    - combo_parser : Modifier combo strings -> X modifier masks
    - keybinds     : Function-key grabs and keycode -> column mapping
    - loop         : HotkeyEventLoop - the blocking event loop
"""

from xlayout.core.system import NO_WINDOW, KeyEvent, EventType, ParentInfo, WindowSystem
from xlayout.core.focus import FocusResolver, TreeTraversalOverflow
from xlayout.core.keybinds import HotkeyManager, Hotkey
from xlayout.core.loop import HotkeyEventLoop, DispatchResult, TargetMode

__all__ = [
    "NO_WINDOW", "KeyEvent", "EventType", "ParentInfo", "WindowSystem",
    "FocusResolver", "TreeTraversalOverflow",
    "HotkeyManager", "Hotkey",
    "HotkeyEventLoop", "DispatchResult", "TargetMode",
]
