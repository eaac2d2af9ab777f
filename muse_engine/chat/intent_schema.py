"""Routing result for a submitted prompt."""

from __future__ import annotations

from dataclasses import dataclass, field

NOOP = "noop"
CHAT = "chat"
GENERATION_USAGE = "generation_usage"
GENERATE_IMAGE = "generate_image"
GENERATE_VIDEO = "generate_video"


@dataclass
class Intent:
    action: str
    raw: str
    prompt: str | None = None
    params: dict[str, str] = field(default_factory=dict)
