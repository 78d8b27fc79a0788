"""Terminal spinner shown while the project is scanned."""

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager

_HIDE_CURSOR = "\033[?25l"
_SHOW_CURSOR = "\033[?25h"

FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")


@contextmanager
def spinner(message: str, *, interval: float = 0.08) -> Iterator[None]:
    """Animate a spinner next to message until the block exits.

    The cursor is hidden while animating and restored afterwards, even when
    the block raises. Nothing is drawn when stdout is not a terminal.

    Usage:
        with spinner("Detecting frameworks"):
            result = detect(project_path)
    """
    if not sys.stdout.isatty():
        yield
        return

    stop_event = threading.Event()

    def animate() -> None:
        index = 0
        while not stop_event.is_set():
            sys.stdout.write(f"\r  {FRAMES[index % len(FRAMES)]} {message}")
            sys.stdout.flush()
            index += 1
            stop_event.wait(interval)

    sys.stdout.write(_HIDE_CURSOR)
    sys.stdout.flush()

    thread = threading.Thread(target=animate, daemon=True)
    thread.start()

    try:
        yield
    finally:
        stop_event.set()
        thread.join(timeout=max(interval * 2, 0.2))
        sys.stdout.write("\r" + " " * (len(message) + 6) + "\r")
        sys.stdout.write(_SHOW_CURSOR)
        sys.stdout.flush()
