"""Image and video generation flows."""

from __future__ import annotations

import base64
import mimetypes
import time
from pathlib import Path
from typing import Callable, Mapping

from ..chat.messages import MODEL, ImageData, Message, VideoData
from ..errors import DownloadFailedError, GenerationEmptyError
from ..providers.base import ImageGenerationConfig, MediaProvider, VideoGenerationConfig
from ..runs.events import EventWriter
from .fetch import FetchResult, fetch_url

POLL_INTERVAL_S = 10.0
IMAGE_STATUS = "Generating image..."
VIDEO_START_STATUS = "Starting video generation... (this can take a few minutes)"
VIDEO_DOWNLOAD_STATUS = "Downloading video..."
VIDEO_POLL_STATUSES: tuple[str, ...] = (
    "Processing your request...",
    "The model is warming up...",
    "Rendering frames...",
    "Almost there, adding finishing touches...",
)
DEFAULT_VIDEO_MIME_TYPE = "video/mp4"

IMAGE_EMPTY_TEXT = (
    "The image could not be generated. This often happens if the request violates the "
    "safety policy (e.g., generating images of real people). Please try a different prompt."
)
VIDEO_LINK_MISSING_TEXT = "API did not return a video link."


def poll_status(poll_count: int) -> str:
    return VIDEO_POLL_STATUSES[poll_count % len(VIDEO_POLL_STATUSES)]


class MediaGenerationOrchestrator:
    def __init__(
        self,
        *,
        image_provider: MediaProvider,
        video_provider: MediaProvider,
        image_model: str,
        video_model: str,
        events: EventWriter,
        media_dir: Path,
        fetch: Callable[[str], FetchResult] = fetch_url,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval_s: float = POLL_INTERVAL_S,
    ) -> None:
        self.image_provider = image_provider
        self.video_provider = video_provider
        self.image_model = image_model
        self.video_model = video_model
        self.events = events
        self.media_dir = media_dir
        self.fetch = fetch
        self.sleep = sleep
        self.poll_interval_s = poll_interval_s

    def generate_image(
        self,
        prompt: str,
        params: Mapping[str, str],
        on_status: Callable[[str], None] | None = None,
    ) -> Message:
        config = ImageGenerationConfig.from_params(params)
        if on_status is not None:
            on_status(IMAGE_STATUS)
        self.events.emit(
            "image_generation_started",
            model=self.image_model,
            prompt=prompt,
            config=config.as_kwargs(),
        )
        images = self.image_provider.generate_images(self.image_model, prompt, config)
        image = next((item for item in images if item.image_bytes), None)
        if image is None:
            raise GenerationEmptyError(IMAGE_EMPTY_TEXT)
        raw = image.image_bytes
        encoded = raw if isinstance(raw, str) else base64.b64encode(raw).decode("ascii")
        self.events.emit(
            "image_generation_completed",
            model=self.image_model,
            mime_type=image.mime_type,
            returned=len(images),
        )
        return Message(
            role=MODEL,
            text=f'Here\'s an image for: "{prompt}"',
            image_data=ImageData(base64=encoded, mime_type=image.mime_type),
        )

    def generate_video(
        self,
        prompt: str,
        params: Mapping[str, str],
        on_status: Callable[[str], None] | None = None,
    ) -> Message:
        status = on_status or (lambda _text: None)
        config = VideoGenerationConfig.from_params(params)
        status(VIDEO_START_STATUS)
        operation = self.video_provider.generate_videos(self.video_model, prompt, config)
        self.events.emit(
            "video_operation_submitted",
            model=self.video_model,
            prompt=prompt,
            config=config.as_kwargs(),
            done=operation.done,
        )

        # TODO: bound this loop once a maximum wait is agreed; the remote side
        # gives no guarantee the operation ever reports done.
        poll_count = 0
        while not operation.done:
            status(poll_status(poll_count))
            poll_count += 1
            self.sleep(self.poll_interval_s)
            operation = self.video_provider.get_videos_operation(operation)
            self.events.emit("video_poll", poll=poll_count, done=operation.done)

        if not operation.video_uri:
            self.events.emit("video_link_missing", polls=poll_count, metadata=operation.metadata)
            raise DownloadFailedError(VIDEO_LINK_MISSING_TEXT)

        status(VIDEO_DOWNLOAD_STATUS)
        result = self.fetch(self.video_provider.download_url(operation.video_uri))
        if not result.ok:
            raise DownloadFailedError(f"Failed to download video: {result.status_text}")

        mime_type = result.content_type or DEFAULT_VIDEO_MIME_TYPE
        path = self._store_media(result.content, mime_type, stem="video")
        self.events.emit(
            "video_downloaded",
            uri=operation.video_uri,
            path=str(path),
            bytes=len(result.content),
            mime_type=mime_type,
            polls=poll_count,
        )
        return Message(
            role=MODEL,
            text=f'Here\'s a video for: "{prompt}"',
            video_data=VideoData(resource_handle=str(path), mime_type=mime_type),
        )

    def _store_media(self, content: bytes, mime_type: str, stem: str) -> Path:
        self.media_dir.mkdir(parents=True, exist_ok=True)
        ext = mimetypes.guess_extension(mime_type) or ".bin"
        path = self.media_dir / f"{stem}-{int(time.time() * 1000)}{ext}"
        path.write_bytes(content)
        return path
