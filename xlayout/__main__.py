"""
xlayout - Entry point.

Run with:  python -m xlayout W1 [W2 ... W12]

Pressing <modifier> + F(i) snaps the focused window into column i.
Column widths are proportional to the weights W1..WK.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from xlayout.core import x11
from xlayout.core.combo_parser import ComboParseError, modifiers_to_str, parse_modifiers
from xlayout.core.focus import FocusResolver
from xlayout.core.keybinds import HotkeyManager
from xlayout.core.loop import HotkeyEventLoop, TargetMode
from xlayout.tiling.columns import MAX_COLUMNS, ColumnLayoutEngine, LayoutError, parse_weights

log = logging.getLogger("xlayout")


DEFAULT_MODIFIER = "ctrl"

EXIT_OK = 0
EXIT_FAILURE = 1


class SafeStreamHandler(logging.StreamHandler):
    """Handler that replaces unencodable characters instead of crashing."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            enc = getattr(self.stream, "encoding", "utf-8") or "utf-8"
            safe = msg.encode(enc, errors="replace").decode(enc, errors="replace")
            self.stream.write(safe + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for xlayout."""
    fmt = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
    handler = SafeStreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, SafeStreamHandler)]:
        root.removeHandler(existing)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xlayout",
        description=(
            "Snap the focused window into one of up to "
            f"{MAX_COLUMNS} columns with <modifier> + F1..F{MAX_COLUMNS}. "
            "Column widths are proportional to the given weights."
        ),
        epilog="Example: xlayout 1 2 1  (Ctrl+F2 puts a window in the wide middle column)",
    )
    parser.add_argument(
        "weights",
        nargs="+",
        metavar="W",
        help=f"positive integer column weight, 1 to {MAX_COLUMNS} of them",
    )
    parser.add_argument(
        "-m", "--modifier",
        default=DEFAULT_MODIFIER,
        help="modifier combo held with the function key, e.g. 'ctrl+alt' "
             "(default: %(default)s)",
    )
    parser.add_argument(
        "-t", "--target",
        choices=[mode.value for mode in TargetMode],
        default=TargetMode.FOCUS.value,
        help="move the focused window or the window under the pointer "
             "(default: %(default)s)",
    )
    parser.add_argument(
        "-d", "--display",
        default=None,
        help="X display to connect to (default: $DISPLAY)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="log debug messages",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Argument errors exit here, before any display connection exists.
    try:
        weights = parse_weights(args.weights)
    except LayoutError as e:
        parser.error(str(e))
    try:
        modifiers = parse_modifiers(args.modifier)
    except ComboParseError as e:
        parser.error(str(e))

    setup_logging(args.verbose)
    log.info("Initializing...")

    try:
        session = x11.X11Session.open(args.display)
    except x11.DisplayConnectionError as e:
        log.error("%s", e)
        return EXIT_FAILURE

    with session:
        hotkeys = HotkeyManager(session)
        try:
            width, height = session.screen_size()
            geometry = ColumnLayoutEngine.build(weights, width)
            log.debug("\n%s", geometry.dump_state())

            loop = HotkeyEventLoop(
                session,
                geometry,
                resolver=FocusResolver(session),
                hotkeys=hotkeys,
                target=TargetMode(args.target),
            )
            loop.setup(modifiers)
            log.info("\n%s", hotkeys.dump_state())
            log.info(
                "Running for %d columns for a %dx%d screen (%s+F1..F%d)...",
                geometry.count,
                width,
                height,
                modifiers_to_str(modifiers),
                geometry.count,
            )
            loop.run()
        except Exception:
            log.exception("Fatal error")
            return EXIT_FAILURE
        finally:
            log.info("Shutting down...")
            try:
                hotkeys.unregister_all()
            except Exception:
                log.debug("Could not release key grabs", exc_info=True)

    log.info("Done.")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
