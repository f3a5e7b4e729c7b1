"""
xlayout - Snap windows into weighted screen columns with function keys.

Subpackages:
    - core   : X11 access, focus resolution, hotkeys and the event loop
    - tiling : Column geometry
"""

__version__ = "0.1.0"
