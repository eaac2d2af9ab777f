"""Provider interfaces and validated generation request records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Protocol

from ..errors import InvalidParameterError

IMAGE_OUTPUT_MIME_TYPE = "image/jpeg"
ALLOWED_ASPECT_RATIOS: tuple[str, ...] = ("1:1", "3:4", "4:3", "9:16", "16:9")

_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ImageGenerationConfig:
    number_of_images: int = 1
    output_mime_type: str = IMAGE_OUTPUT_MIME_TYPE
    aspect_ratio: str | None = None

    def __post_init__(self) -> None:
        if self.aspect_ratio is not None and self.aspect_ratio not in ALLOWED_ASPECT_RATIOS:
            raise InvalidParameterError(
                f'Invalid aspect ratio "{self.aspect_ratio}". '
                f"Supported values are: {', '.join(ALLOWED_ASPECT_RATIOS)}."
            )

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "ImageGenerationConfig":
        return cls(aspect_ratio=params.get("aspect-ratio") or None)

    def as_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "number_of_images": self.number_of_images,
            "output_mime_type": self.output_mime_type,
        }
        if self.aspect_ratio:
            kwargs["aspect_ratio"] = self.aspect_ratio
        return kwargs


@dataclass(frozen=True)
class VideoGenerationConfig:
    number_of_videos: int = 1
    duration_seconds: int | None = None

    def __post_init__(self) -> None:
        if self.duration_seconds is not None and self.duration_seconds <= 0:
            raise InvalidParameterError(_duration_error(str(self.duration_seconds)))

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "VideoGenerationConfig":
        raw = params.get("duration")
        if not raw:
            return cls()
        return cls(duration_seconds=parse_duration(raw))

    def as_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"number_of_videos": self.number_of_videos}
        if self.duration_seconds is not None:
            kwargs["duration_seconds"] = self.duration_seconds
        return kwargs


def parse_duration(raw: str) -> int:
    value = raw.strip()
    # int() also takes "5_0" and non-ASCII digits.
    if not _DIGITS.fullmatch(value):
        raise InvalidParameterError(_duration_error(raw))
    seconds = int(value)
    if seconds <= 0:
        raise InvalidParameterError(_duration_error(raw))
    return seconds


def _duration_error(raw: str) -> str:
    return (
        f'Invalid duration "{raw}". '
        "Please provide a positive number of seconds (e.g., --duration 5)."
    )


@dataclass
class GeneratedImage:
    image_bytes: bytes | None
    mime_type: str = IMAGE_OUTPUT_MIME_TYPE


@dataclass
class VideoOperation:
    handle: Any
    done: bool = False
    video_uri: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class ChatStream(Protocol):
    def send_message_stream(self, parts: list[dict[str, Any]]) -> Iterator[str]:
        ...


class MediaProvider(Protocol):
    name: str

    def create_chat(self, model: str, history: list[dict[str, Any]]) -> ChatStream:
        ...

    def generate_images(
        self, model: str, prompt: str, config: ImageGenerationConfig
    ) -> list[GeneratedImage]:
        ...

    def generate_videos(self, model: str, prompt: str, config: VideoGenerationConfig) -> VideoOperation:
        ...

    def get_videos_operation(self, operation: VideoOperation) -> VideoOperation:
        ...

    def download_url(self, uri: str) -> str:
        ...


class ProviderRegistry:
    def __init__(self, providers: Iterable[MediaProvider]) -> None:
        self._providers = {provider.name: provider for provider in providers}

    def get(self, name: str) -> MediaProvider | None:
        return self._providers.get(name)

    def list(self) -> list[str]:
        return sorted(self._providers.keys())
