"""Gemini / Imagen / Veo provider backed by the google-genai SDK."""

from __future__ import annotations

import base64
from typing import Any, Iterator
from urllib.parse import quote

try:
    from google import genai  # type: ignore
    from google.genai import types  # type: ignore
except ImportError:  # pragma: no cover
    genai = None  # type: ignore
    types = None  # type: ignore

from ..utils import resolve_api_key
from .base import (
    GeneratedImage,
    ImageGenerationConfig,
    VideoGenerationConfig,
    VideoOperation,
)


class GeminiChat:
    def __init__(self, chat: Any) -> None:
        self._chat = chat

    def send_message_stream(self, parts: list[dict[str, Any]]) -> Iterator[str]:
        message = [_to_part(part) for part in parts]
        for chunk in self._chat.send_message_stream(message=message):
            yield getattr(chunk, "text", None) or ""


class GeminiProvider:
    name = "gemini"

    def __init__(self, api_key: str | None = None, client: Any | None = None) -> None:
        self._api_key = api_key or resolve_api_key()
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if genai is None:
                raise RuntimeError("google-genai package not installed. Run: pip install google-genai")
            if not self._api_key:
                raise RuntimeError("GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY) not set.")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def create_chat(self, model: str, history: list[dict[str, Any]]) -> GeminiChat:
        contents = [_to_content(turn) for turn in history]
        return GeminiChat(self.client.chats.create(model=model, history=contents))

    def generate_images(
        self, model: str, prompt: str, config: ImageGenerationConfig
    ) -> list[GeneratedImage]:
        response = self.client.models.generate_images(
            model=model,
            prompt=prompt,
            config=types.GenerateImagesConfig(**config.as_kwargs()),
        )
        results: list[GeneratedImage] = []
        for item in getattr(response, "generated_images", None) or []:
            image = getattr(item, "image", None)
            results.append(
                GeneratedImage(
                    image_bytes=getattr(image, "image_bytes", None),
                    mime_type=getattr(image, "mime_type", None) or config.output_mime_type,
                )
            )
        return results

    def generate_videos(self, model: str, prompt: str, config: VideoGenerationConfig) -> VideoOperation:
        operation = self.client.models.generate_videos(
            model=model,
            prompt=prompt,
            config=types.GenerateVideosConfig(**config.as_kwargs()),
        )
        return _wrap_operation(operation)

    def get_videos_operation(self, operation: VideoOperation) -> VideoOperation:
        return _wrap_operation(self.client.operations.get(operation.handle))

    def download_url(self, uri: str) -> str:
        if not self._api_key:
            return uri
        separator = "&" if "?" in uri else "?"
        return f"{uri}{separator}key={quote(self._api_key, safe='')}"


def _to_part(part: dict[str, Any]) -> Any:
    inline = part.get("inline_data")
    if inline is not None:
        return types.Part.from_bytes(
            data=base64.b64decode(inline["data"]),
            mime_type=inline["mime_type"],
        )
    return types.Part.from_text(text=part.get("text") or "")


def _to_content(turn: dict[str, Any]) -> Any:
    return types.Content(role=turn["role"], parts=[_to_part(part) for part in turn["parts"]])


def _wrap_operation(operation: Any) -> VideoOperation:
    done = bool(getattr(operation, "done", False))
    metadata: dict[str, Any] = {"name": getattr(operation, "name", None)}
    error = getattr(operation, "error", None)
    if error:
        metadata["error"] = error
    return VideoOperation(
        handle=operation,
        done=done,
        video_uri=_first_video_uri(operation) if done else None,
        metadata=metadata,
    )


def _first_video_uri(operation: Any) -> str | None:
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos = getattr(response, "generated_videos", None) or []
    if not videos:
        return None
    video = getattr(videos[0], "video", None)
    uri = getattr(video, "uri", None)
    return str(uri) if uri else None
