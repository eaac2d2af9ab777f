from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import pytest

from muse_engine.chat.messages import Message
from muse_engine.engine import MuseEngine
from muse_engine.media.fetch import FetchResult
from muse_engine.models.registry import IMAGE, TEXT, VIDEO, ModelRegistry, ModelSpec
from muse_engine.providers.base import (
    GeneratedImage,
    ImageGenerationConfig,
    ProviderRegistry,
    VideoGenerationConfig,
    VideoOperation,
)


class FakeChat:
    def __init__(self, provider: "FakeProvider", history: list[dict[str, Any]]) -> None:
        self.provider = provider
        self.history = history

    def send_message_stream(self, parts: list[dict[str, Any]]) -> Iterator[str]:
        self.provider.sent.append(parts)
        for fragment in self.provider.fragments:
            yield fragment
        if self.provider.stream_error is not None:
            raise self.provider.stream_error


class FakeProvider:
    name = "fake"

    def __init__(self) -> None:
        self.fragments: list[str] = ["Hello", " there"]
        self.stream_error: Exception | None = None
        self.images: list[GeneratedImage] = [GeneratedImage(image_bytes=b"jpeg-bytes")]
        self.operations: list[VideoOperation] = [
            VideoOperation(handle="op-1", done=True, video_uri="https://media.example/v.mp4")
        ]
        self.sent: list[list[dict[str, Any]]] = []
        self.histories: list[list[dict[str, Any]]] = []
        self.image_calls: list[tuple[str, str, ImageGenerationConfig]] = []
        self.video_calls: list[tuple[str, str, VideoGenerationConfig]] = []
        self.polls = 0

    def create_chat(self, model: str, history: list[dict[str, Any]]) -> FakeChat:
        self.histories.append(history)
        return FakeChat(self, history)

    def generate_images(self, model: str, prompt: str, config: ImageGenerationConfig) -> list[GeneratedImage]:
        self.image_calls.append((model, prompt, config))
        return self.images

    def generate_videos(self, model: str, prompt: str, config: VideoGenerationConfig) -> VideoOperation:
        self.video_calls.append((model, prompt, config))
        return self.operations.pop(0)

    def get_videos_operation(self, operation: VideoOperation) -> VideoOperation:
        self.polls += 1
        return self.operations.pop(0)

    def download_url(self, uri: str) -> str:
        return f"{uri}?key=test-key"


class FakeFetch:
    def __init__(self, result: FetchResult | None = None) -> None:
        self.result = result or FetchResult(
            ok=True, status=200, status_text="OK", content=b"mp4-bytes", content_type="video/mp4"
        )
        self.urls: list[str] = []

    def __call__(self, url: str) -> FetchResult:
        self.urls.append(url)
        return self.result


class RecordingPlaceholder:
    def __init__(self) -> None:
        self.statuses: list[str] = []
        self.updates: list[str] = []
        self.completed: Message | None = None
        self.error: str | None = None

    def status(self, text: str) -> None:
        self.statuses.append(text)

    def stream(self, accumulated: str) -> None:
        self.updates.append(accumulated)

    def complete(self, message: Message) -> None:
        self.completed = message

    def fail(self, error_text: str) -> None:
        self.error = error_text


class RecordingRenderer:
    def __init__(self) -> None:
        self.rendered: list[Message] = []
        self.placeholders: list[RecordingPlaceholder] = []
        self.notices: list[str] = []
        self.form_states: list[bool] = []
        self.resets = 0
        self.clears = 0

    def render_message(self, message: Message) -> None:
        self.rendered.append(message)

    def begin_reply(self) -> RecordingPlaceholder:
        placeholder = RecordingPlaceholder()
        self.placeholders.append(placeholder)
        return placeholder

    def notice(self, text: str) -> None:
        self.notices.append(text)

    def set_form_state(self, busy: bool) -> None:
        self.form_states.append(busy)

    def reset_input(self) -> None:
        self.resets += 1

    def clear(self) -> None:
        self.clears += 1


FAKE_MODELS = {
    "fake-text": ModelSpec(name="fake-text", provider="fake", capabilities=(TEXT, "vision")),
    "fake-image": ModelSpec(name="fake-image", provider="fake", capabilities=(IMAGE,)),
    "fake-video": ModelSpec(name="fake-video", provider="fake", capabilities=(VIDEO,)),
}


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def fetch() -> FakeFetch:
    return FakeFetch()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def engine(
    tmp_path: Path,
    provider: FakeProvider,
    renderer: RecordingRenderer,
    fetch: FakeFetch,
    sleeps: list[float],
) -> MuseEngine:
    return MuseEngine(
        tmp_path / "store.sqlite",
        tmp_path / "events.jsonl",
        tmp_path / "media",
        renderer=renderer,
        provider_registry=ProviderRegistry([provider]),
        model_registry=ModelRegistry(FAKE_MODELS),
        fetch=fetch,
        sleep=sleeps.append,
        poll_interval_s=10.0,
    )
