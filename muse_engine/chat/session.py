"""Streaming conversational exchange with the model."""

from __future__ import annotations

from typing import Any, Callable

from ..providers.base import ChatStream, MediaProvider
from .messages import ImageData, build_request_parts


class ChatSession:
    """A model chat bound to a context reconstructed from prior turns."""

    def __init__(self, provider: MediaProvider, model: str, history: list[dict[str, Any]] | None = None) -> None:
        self.provider = provider
        self.model = model
        self.history = list(history or [])
        self._chat: ChatStream | None = None

    @property
    def chat(self) -> ChatStream:
        # Created lazily so a missing API key surfaces as an exchange failure.
        if self._chat is None:
            self._chat = self.provider.create_chat(self.model, self.history)
        return self._chat

    def exchange(
        self,
        text: str,
        image: ImageData | None = None,
        on_update: Callable[[str], None] | None = None,
    ) -> str:
        """Send one turn and return the full reply.

        ``on_update`` receives the running accumulation after every fragment.
        Any error raised by the stream propagates; partial text is dropped.
        """
        parts = build_request_parts(text, image)
        accumulated = ""
        for fragment in self.chat.send_message_stream(parts):
            accumulated += fragment or ""
            if on_update is not None:
                on_update(accumulated)
        return accumulated
