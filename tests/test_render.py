from __future__ import annotations

import base64
import io
from pathlib import Path

from muse_engine.chat.messages import ImageData, Message, VideoData
from muse_engine.render import ConsoleRenderer


def test_console_renderer_exports_images(tmp_path: Path) -> None:
    stream = io.StringIO()
    renderer = ConsoleRenderer(tmp_path / "media", stream=stream)
    encoded = base64.b64encode(b"jpeg").decode("ascii")
    renderer.render_message(
        Message(role="model", text="Here's an image", image_data=ImageData(base64=encoded, mime_type="image/jpeg"))
    )
    exported = list((tmp_path / "media").iterdir())
    assert len(exported) == 1
    assert exported[0].read_bytes() == b"jpeg"
    assert str(exported[0]) in stream.getvalue()
    assert stream.getvalue().startswith("model> ")


def test_console_placeholder_streams_deltas(tmp_path: Path) -> None:
    stream = io.StringIO()
    renderer = ConsoleRenderer(tmp_path, stream=stream)
    placeholder = renderer.begin_reply()
    placeholder.status("Thinking...")
    placeholder.stream("Hel")
    placeholder.stream("Hello")
    placeholder.complete(Message(role="model", text="Hello"))
    output = stream.getvalue()
    assert "Thinking..." in output
    assert output.endswith("model> Hello\n")


def test_console_placeholder_renders_media_reply(tmp_path: Path) -> None:
    stream = io.StringIO()
    renderer = ConsoleRenderer(tmp_path, stream=stream)
    placeholder = renderer.begin_reply()
    placeholder.status("Downloading video...")
    placeholder.complete(
        Message(role="model", text="Here's a video", video_data=VideoData("/tmp/v.mp4", "video/mp4"))
    )
    assert "[video video/mp4: /tmp/v.mp4]" in stream.getvalue()


def test_console_placeholder_reports_failure(tmp_path: Path) -> None:
    stream = io.StringIO()
    placeholder = ConsoleRenderer(tmp_path, stream=stream).begin_reply()
    placeholder.stream("partial")
    placeholder.fail("quota exceeded")
    assert stream.getvalue().endswith("Error:\x1b[0m quota exceeded\n")


def test_console_renderer_reuses_exported_image(tmp_path: Path) -> None:
    renderer = ConsoleRenderer(tmp_path / "media", stream=io.StringIO())
    image = ImageData(base64=base64.b64encode(b"jpeg").decode("ascii"), mime_type="image/jpeg")
    renderer.render_message(Message(role="model", text="first", image_data=image))
    renderer.render_message(Message(role="model", text="again", image_data=image))
    assert len(list((tmp_path / "media").iterdir())) == 1
