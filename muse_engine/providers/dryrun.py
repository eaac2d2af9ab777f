"""Dry-run provider (offline)."""

from __future__ import annotations

import hashlib
import io
import time
from pathlib import Path
from typing import Any, Iterator

from PIL import Image, ImageDraw, ImageFont

from .base import (
    GeneratedImage,
    ImageGenerationConfig,
    VideoGenerationConfig,
    VideoOperation,
)

_RATIO_SIZES = {
    "1:1": (512, 512),
    "3:4": (384, 512),
    "4:3": (512, 384),
    "9:16": (288, 512),
    "16:9": (512, 288),
}


class DryRunChat:
    def __init__(self, history: list[dict[str, Any]]) -> None:
        self.history = list(history)

    def send_message_stream(self, parts: list[dict[str, Any]]) -> Iterator[str]:
        text = " ".join(part["text"] for part in parts if part.get("text"))
        has_image = any("inline_data" in part for part in parts)
        reply = f"dryrun reply to: {text or '(no text)'}"
        if has_image:
            reply += " [with image]"
        words = reply.split(" ")
        for idx, word in enumerate(words):
            yield word if idx == 0 else f" {word}"
        self.history.append({"role": "user", "parts": parts})
        self.history.append({"role": "model", "parts": [{"text": reply}]})


class DryRunProvider:
    name = "dryrun"

    def __init__(self, out_dir: Path | None = None, polls_until_done: int = 2) -> None:
        self.out_dir = out_dir or Path(".")
        self.polls_until_done = max(0, polls_until_done)
        self._font = None

    def create_chat(self, model: str, history: list[dict[str, Any]]) -> DryRunChat:
        return DryRunChat(history)

    def generate_images(
        self, model: str, prompt: str, config: ImageGenerationConfig
    ) -> list[GeneratedImage]:
        size = _RATIO_SIZES.get(config.aspect_ratio or "1:1", _RATIO_SIZES["1:1"])
        results: list[GeneratedImage] = []
        for idx in range(config.number_of_images):
            image = self._render_frame(prompt, size, seed=idx)
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG")
            results.append(GeneratedImage(image_bytes=buffer.getvalue(), mime_type="image/jpeg"))
        return results

    def generate_videos(self, model: str, prompt: str, config: VideoGenerationConfig) -> VideoOperation:
        handle = {
            "prompt": prompt,
            "frames": max(2, min(12, (config.duration_seconds or 4) * 2)),
            "polls": 0,
        }
        return self._advance(handle)

    def get_videos_operation(self, operation: VideoOperation) -> VideoOperation:
        handle = dict(operation.handle)
        handle["polls"] += 1
        return self._advance(handle)

    def download_url(self, uri: str) -> str:
        return uri

    def _advance(self, handle: dict[str, Any]) -> VideoOperation:
        if handle["polls"] < self.polls_until_done:
            return VideoOperation(handle=handle, done=False)
        path = self._write_animation(handle["prompt"], handle["frames"])
        return VideoOperation(handle=handle, done=True, video_uri=path.resolve().as_uri())

    def _write_animation(self, prompt: str, frame_count: int) -> Path:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        frames = [self._render_frame(prompt, _RATIO_SIZES["16:9"], seed=idx) for idx in range(frame_count)]
        path = self.out_dir / f"dryrun-video-{int(time.time() * 1000)}.gif"
        frames[0].save(path, save_all=True, append_images=frames[1:], duration=250, loop=0)
        return path

    def _render_frame(self, prompt: str, size: tuple[int, int], seed: int) -> Image.Image:
        image = Image.new("RGB", size, _color_from_prompt(prompt, seed))
        draw = ImageDraw.Draw(image)
        font = self._font or ImageFont.load_default()
        draw.text((16, 16), f"dryrun\n{prompt[:48]}", fill=(255, 255, 255), font=font)
        return image


def _color_from_prompt(prompt: str, seed: int) -> tuple[int, int, int]:
    digest = hashlib.sha256(f"{prompt}:{seed}".encode("utf-8")).digest()
    return digest[0], digest[1], digest[2]
