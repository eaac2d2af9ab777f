"""Conversation messages and their persisted / model-context shapes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

USER = "user"
MODEL = "model"
ROLES = (USER, MODEL)

GREETING_TEXT = "Hello! I'm your AI assistant. How can I help you today?"


@dataclass(frozen=True)
class ImageData:
    base64: str
    mime_type: str


@dataclass(frozen=True)
class VideoData:
    """Session-local media reference; never persisted."""

    resource_handle: str
    mime_type: str


@dataclass(eq=False)
class Message:
    role: str
    text: str = ""
    image_data: ImageData | None = None
    video_data: VideoData | None = None


def greeting_message() -> Message:
    return Message(role=MODEL, text=GREETING_TEXT)


def to_persisted(message: Message) -> dict[str, Any]:
    payload: dict[str, Any] = {"role": message.role, "text": message.text}
    if message.image_data is not None:
        payload["imageData"] = {
            "base64": message.image_data.base64,
            "mimeType": message.image_data.mime_type,
        }
    return payload


def from_persisted(payload: Any) -> Message | None:
    if not isinstance(payload, dict):
        return None
    role = payload.get("role")
    if role not in ROLES:
        return None
    text = payload.get("text")
    image_data = None
    raw_image = payload.get("imageData")
    if isinstance(raw_image, dict) and raw_image.get("base64"):
        image_data = ImageData(
            base64=str(raw_image["base64"]),
            mime_type=str(raw_image.get("mimeType") or "image/jpeg"),
        )
    return Message(role=role, text=text if isinstance(text, str) else "", image_data=image_data)


def inline_image_part(image: ImageData) -> dict[str, Any]:
    return {"inline_data": {"data": image.base64, "mime_type": image.mime_type}}


def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def build_request_parts(text: str, image: ImageData | None) -> list[dict[str, Any]]:
    """Parts for one chat request: image first, then text when non-empty."""
    parts: list[dict[str, Any]] = []
    if image is not None:
        parts.append(inline_image_part(image))
    if text:
        parts.append(text_part(text))
    return parts


def build_context_turn(message: Message) -> dict[str, Any]:
    # The streaming endpoint rejects turns without a text part, even an empty one.
    parts: list[dict[str, Any]] = []
    if message.image_data is not None:
        parts.append(inline_image_part(message.image_data))
    parts.append(text_part(message.text or ""))
    return {"role": message.role, "parts": parts}


def build_context(messages: Iterable[Message]) -> list[dict[str, Any]]:
    return [build_context_turn(message) for message in messages if message.role in ROLES]
