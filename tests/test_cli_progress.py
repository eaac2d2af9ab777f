from __future__ import annotations

import time

from muse_engine.cli_progress import ProgressTicker, _format_duration, _separator_line


class FakeStream:
    def __init__(self, is_tty: bool) -> None:
        self._isatty = is_tty
        self.buffer: list[str] = []

    def isatty(self) -> bool:  # pragma: no cover - signature mimic
        return self._isatty

    def write(self, data: str) -> None:
        self.buffer.append(data)

    def flush(self) -> None:  # pragma: no cover - no-op for tests
        return None

    @property
    def text(self) -> str:
        return "".join(self.buffer)


def test_ticker_non_tty_prints_each_label_once() -> None:
    stream = FakeStream(is_tty=False)
    ticker = ProgressTicker("Starting video generation...", stream=stream, interval_s=0.01)
    ticker.start_ticking()
    ticker.update_label("Rendering frames...")
    ticker.update_label("Rendering frames...")
    ticker.stop(done=True)
    output = stream.text
    lines = [line for line in output.splitlines() if line.strip()]
    assert len(lines) == 3
    assert "Starting video generation..." in lines[0]
    assert "Rendering frames..." in lines[1]
    assert "Done in" in lines[2]
    assert "\r" not in output


def test_ticker_tty_updates_in_place() -> None:
    stream = FakeStream(is_tty=True)
    ticker = ProgressTicker("Thinking...", stream=stream, interval_s=0.2)
    ticker.start_ticking()
    time.sleep(0.03)
    ticker.stop(done=True)
    output = stream.text
    assert "\r" in output
    assert "\x1b[K" in output
    assert output.count("Done in") == 1


def test_ticker_stop_without_done_line() -> None:
    stream = FakeStream(is_tty=False)
    ticker = ProgressTicker("Generating image...", stream=stream)
    ticker.start_ticking()
    ticker.stop(done=False)
    assert "Done in" not in stream.text


def test_format_duration() -> None:
    assert _format_duration(5) == "5s"
    assert _format_duration(65) == "1m 05s"
    assert _format_duration(3725) == "1h 2m 05s"


def test_separator_line_centers_label() -> None:
    line = _separator_line("Done in 3s", 20)
    assert len(line) == 20
    assert " Done in 3s " in line
    assert _separator_line("Done in 3s", 5) == "Done in 3s"
