"""Mutable per-session state owned by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .chat.messages import ImageData, Message


@dataclass
class SessionState:
    conversation: list[Message] = field(default_factory=list)
    attachment: ImageData | None = None
    identity: str | None = None
    recording: bool = False
    busy: bool = False

    def append(self, message: Message) -> Message:
        self.conversation.append(message)
        return message

    def clear_attachment(self) -> None:
        self.attachment = None

    def reset(self) -> None:
        self.conversation = []
        self.attachment = None
        self.identity = None
        self.recording = False
        self.busy = False
