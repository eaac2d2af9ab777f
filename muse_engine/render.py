"""Rendering surface used by the engine, plus the terminal implementation."""

from __future__ import annotations

import base64
import hashlib
import mimetypes
import sys
from pathlib import Path
from typing import Protocol, TextIO

from .chat.messages import USER, ImageData, Message
from .cli_progress import ProgressTicker

_RED = "\x1b[31m"
_DIM = "\x1b[2m"
_RESET = "\x1b[0m"


class Placeholder(Protocol):
    """The in-progress model reply shown while an operation runs."""

    def status(self, text: str) -> None:
        ...

    def stream(self, accumulated: str) -> None:
        ...

    def complete(self, message: Message) -> None:
        ...

    def fail(self, error_text: str) -> None:
        ...


class Renderer(Protocol):
    def render_message(self, message: Message) -> None:
        ...

    def begin_reply(self) -> Placeholder:
        ...

    def notice(self, text: str) -> None:
        ...

    def set_form_state(self, busy: bool) -> None:
        ...

    def reset_input(self) -> None:
        ...

    def clear(self) -> None:
        ...


class ConsolePlaceholder:
    def __init__(self, renderer: "ConsoleRenderer") -> None:
        self._renderer = renderer
        self._ticker: ProgressTicker | None = None
        self._printed = ""

    def status(self, text: str) -> None:
        if self._ticker is None:
            self._ticker = ProgressTicker(text, stream=self._renderer.stream)
            self._ticker.start_ticking()
            return
        self._ticker.update_label(text)

    def stream(self, accumulated: str) -> None:
        self._stop_ticker(done=False)
        out = self._renderer.stream
        if not self._printed:
            out.write("model> ")
        if accumulated.startswith(self._printed):
            out.write(accumulated[len(self._printed) :])
        else:
            out.write(f"\n{accumulated}")
        out.flush()
        self._printed = accumulated

    def complete(self, message: Message) -> None:
        self._stop_ticker(done=True)
        if self._printed and not message.image_data and not message.video_data:
            self._renderer.stream.write("\n")
            self._renderer.stream.flush()
            return
        self._renderer.render_message(message)

    def fail(self, error_text: str) -> None:
        self._stop_ticker(done=False)
        prefix = "\n" if self._printed else ""
        self._renderer.stream.write(f"{prefix}{_RED}Error:{_RESET} {error_text}\n")
        self._renderer.stream.flush()

    def _stop_ticker(self, done: bool) -> None:
        if self._ticker is not None:
            self._ticker.stop(done=done)
            self._ticker = None


class ConsoleRenderer:
    def __init__(self, media_dir: Path, stream: TextIO | None = None) -> None:
        self.media_dir = media_dir
        self.stream = stream or sys.stdout
        self.busy = False

    def render_message(self, message: Message) -> None:
        label = "you" if message.role == USER else "model"
        lines: list[str] = []
        if message.image_data is not None:
            path = self._export_image(message.image_data)
            lines.append(f"{_DIM}[image {message.image_data.mime_type}: {path}]{_RESET}")
        if message.video_data is not None:
            lines.append(
                f"{_DIM}[video {message.video_data.mime_type}: {message.video_data.resource_handle}]{_RESET}"
            )
        if message.text:
            lines.append(message.text)
        self.stream.write(f"{label}> " + "\n".join(lines or [""]) + "\n")
        self.stream.flush()

    def begin_reply(self) -> ConsolePlaceholder:
        return ConsolePlaceholder(self)

    def notice(self, text: str) -> None:
        self.stream.write(f"{_DIM}{text}{_RESET}\n")
        self.stream.flush()

    def set_form_state(self, busy: bool) -> None:
        self.busy = busy

    def reset_input(self) -> None:
        return None

    def clear(self) -> None:
        if getattr(self.stream, "isatty", lambda: False)():
            self.stream.write("\033[2J\033[H")
            self.stream.flush()

    def _export_image(self, image: ImageData) -> Path:
        # Named by content so re-rendering a stored conversation reuses the file.
        digest = hashlib.sha256(image.base64.encode("utf-8")).hexdigest()[:16]
        ext = mimetypes.guess_extension(image.mime_type) or ".img"
        path = self.media_dir / f"image-{digest}{ext}"
        if not path.exists():
            self.media_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(base64.b64decode(image.base64))
        return path
