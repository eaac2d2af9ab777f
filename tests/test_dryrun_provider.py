from __future__ import annotations

import io
from pathlib import Path

from PIL import Image

from muse_engine.chat.messages import ImageData, build_request_parts
from muse_engine.providers.base import ImageGenerationConfig, VideoGenerationConfig
from muse_engine.providers.dryrun import DryRunProvider


def test_dryrun_chat_streams_words() -> None:
    chat = DryRunProvider().create_chat("dryrun-text-1", [])
    fragments = list(chat.send_message_stream(build_request_parts("hello muse", None)))
    assert "".join(fragments) == "dryrun reply to: hello muse"
    assert len(fragments) > 1


def test_dryrun_chat_notes_attached_image() -> None:
    chat = DryRunProvider().create_chat("dryrun-text-1", [])
    parts = build_request_parts("", ImageData(base64="aGk=", mime_type="image/png"))
    assert "".join(chat.send_message_stream(parts)) == "dryrun reply to: (no text) [with image]"


def test_dryrun_images_follow_aspect_ratio() -> None:
    images = DryRunProvider().generate_images("dryrun-image-1", "a cat", ImageGenerationConfig(aspect_ratio="16:9"))
    assert len(images) == 1
    assert images[0].mime_type == "image/jpeg"
    with Image.open(io.BytesIO(images[0].image_bytes or b"")) as image:
        assert image.size == (512, 288)


def test_dryrun_video_completes_after_polls(tmp_path: Path) -> None:
    provider = DryRunProvider(out_dir=tmp_path, polls_until_done=2)
    operation = provider.generate_videos("dryrun-video-1", "waves", VideoGenerationConfig(duration_seconds=2))
    assert not operation.done
    operation = provider.get_videos_operation(operation)
    assert not operation.done
    operation = provider.get_videos_operation(operation)
    assert operation.done
    assert operation.video_uri is not None
    assert operation.video_uri.startswith("file://")
    gifs = list(tmp_path.glob("dryrun-video-*.gif"))
    assert len(gifs) == 1
    with Image.open(gifs[0]) as animation:
        assert animation.n_frames == 4
    assert provider.download_url(operation.video_uri) == operation.video_uri
