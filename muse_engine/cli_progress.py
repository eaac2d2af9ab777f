"""Terminal loading indicator."""

from __future__ import annotations

import os
import shutil
import sys
import threading
import time
from typing import TextIO

_BOLD = "\x1b[1m"
_GREY = "\x1b[38;2;150;157;165m"
_RESET = "\x1b[0m"


def progress_line(label: str, start: float | None = None) -> tuple[str, float]:
    now = time.monotonic()
    origin = now if start is None else start
    elapsed = max(0, int(now - origin))
    return f"• {label} ({_format_duration(elapsed)})", origin


class ProgressTicker:
    """Single-line spinner whose label can change while it runs.

    On a TTY the line is redrawn in place every ``interval_s``; otherwise each
    label change is written once on its own line.
    """

    def __init__(
        self,
        label: str,
        stream: TextIO | None = None,
        interval_s: float = 1.0,
        done_label: str = "Done in",
    ) -> None:
        self.label = label
        self.done_label = done_label
        self.start: float | None = None
        self.stream = stream or sys.stdout
        self.interval_s = max(0.2, interval_s)
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._enabled = bool(getattr(self.stream, "isatty", lambda: False)())
        self._started = False

    def start_ticking(self) -> None:
        line, origin = progress_line(self.label, self.start)
        self.start = origin
        if not self._enabled:
            self._write_line(f"{_BOLD}{line}{_RESET}", newline=True)
            return
        self._write_line(f"{_BOLD}{line}{_RESET}", newline=False)
        self._started = True
        self._thread.start()

    def update_label(self, label: str) -> None:
        if label == self.label:
            return
        self.label = label
        if self._stop.is_set():
            return
        line, _ = progress_line(self.label, self.start)
        self._write_line(f"{_BOLD}{line}{_RESET}", newline=not self._enabled)

    def stop(self, done: bool = True) -> None:
        self._stop.set()
        if self._started:
            self._thread.join()
        if self._enabled:
            self._write_line("", newline=False)
        if done:
            self._write_done_line()

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            line, _ = progress_line(self.label, self.start)
            self._write_line(f"{_BOLD}{line}{_RESET}", newline=False)

    def _write_line(self, line: str, newline: bool) -> None:
        with self._lock:
            if self._enabled:
                self.stream.write("\r")
                self.stream.write(line)
                self.stream.write("\033[K")
            else:
                self.stream.write(line)
            if newline:
                self.stream.write("\n")
            self.stream.flush()

    def _write_done_line(self) -> None:
        elapsed = max(0, int(time.monotonic() - (self.start or time.monotonic())))
        width = _resolve_terminal_width(self.stream, 100)
        line = _separator_line(f"{self.done_label} {_format_duration(elapsed)}", width)
        self._write_line(f"{_GREY}{line}{_RESET}", newline=True)


def _format_duration(seconds: int) -> str:
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs:02d}s"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def _separator_line(label: str, width: int) -> str:
    content = f" {label} "
    if width <= len(content) + 2:
        return content.strip()
    remaining = width - len(content)
    left = remaining // 2
    right = remaining - left
    return f"{'─' * left}{content}{'─' * right}"


def _resolve_terminal_width(stream: TextIO | None, fallback: int) -> int:
    if stream and hasattr(stream, "fileno"):
        try:
            return os.get_terminal_size(stream.fileno()).columns
        except (OSError, ValueError):
            pass
    return shutil.get_terminal_size(fallback=(fallback, 20)).columns
