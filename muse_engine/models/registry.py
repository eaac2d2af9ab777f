"""Model registry for Muse."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

TEXT = "text"
IMAGE = "image"
VIDEO = "video"


@dataclass(frozen=True)
class ModelSpec:
    name: str
    provider: str
    capabilities: tuple[str, ...]

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities


_DEFAULT_MODELS: dict[str, ModelSpec] = {
    "gemini-2.5-flash": ModelSpec(
        name="gemini-2.5-flash",
        provider="gemini",
        capabilities=(TEXT, "vision"),
    ),
    "imagen-4.0-generate-001": ModelSpec(
        name="imagen-4.0-generate-001",
        provider="gemini",
        capabilities=(IMAGE,),
    ),
    "veo-2.0-generate-001": ModelSpec(
        name="veo-2.0-generate-001",
        provider="gemini",
        capabilities=(VIDEO,),
    ),
    "dryrun-text-1": ModelSpec(
        name="dryrun-text-1",
        provider="dryrun",
        capabilities=(TEXT, "vision"),
    ),
    "dryrun-image-1": ModelSpec(
        name="dryrun-image-1",
        provider="dryrun",
        capabilities=(IMAGE,),
    ),
    "dryrun-video-1": ModelSpec(
        name="dryrun-video-1",
        provider="dryrun",
        capabilities=(VIDEO,),
    ),
}

DRYRUN_MODELS = {TEXT: "dryrun-text-1", IMAGE: "dryrun-image-1", VIDEO: "dryrun-video-1"}


class ModelRegistry:
    def __init__(self, models: Mapping[str, ModelSpec] | None = None) -> None:
        self._models = dict(models) if models else dict(_DEFAULT_MODELS)

    def get(self, name: str) -> ModelSpec | None:
        return self._models.get(name)

    def by_capability(self, capability: str) -> list[ModelSpec]:
        return [model for model in self._models.values() if model.supports(capability)]

    def ensure(self, name: str, capability: str) -> ModelSpec | None:
        model = self.get(name)
        if model and model.supports(capability):
            return model
        return None
