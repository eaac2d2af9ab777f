from __future__ import annotations

import pytest

from muse_engine.models.registry import DRYRUN_MODELS, ModelRegistry, ModelSpec
from muse_engine.models.selectors import ModelSelector
from muse_engine.providers.base import ProviderRegistry


def _video_model(name: str) -> ModelSpec:
    return ModelSpec(name=name, provider="dryrun", capabilities=("video",))


def test_model_selector_falls_back_when_requested_model_unavailable() -> None:
    registry = ModelRegistry({"veo-fallback": _video_model("veo-fallback")})
    selection = ModelSelector(registry).select("missing", "video")

    assert selection.model.name == "veo-fallback"
    assert selection.requested == "missing"
    assert selection.fallback_reason == "Requested model 'missing' unavailable for capability 'video'."


def test_model_selector_no_request_uses_default_silently() -> None:
    selection = ModelSelector().select(None, "text")
    assert selection.model.name == "gemini-2.5-flash"
    assert selection.fallback_reason is None


def test_model_selector_defaults_per_capability() -> None:
    selector = ModelSelector()
    assert selector.select(None, "image").model.name == "imagen-4.0-generate-001"
    assert selector.select(None, "video").model.name == "veo-2.0-generate-001"


def test_model_selector_dryrun_models_resolve() -> None:
    selector = ModelSelector()
    for capability, name in DRYRUN_MODELS.items():
        selection = selector.select(name, capability)
        assert selection.model.provider == "dryrun"
        assert selection.fallback_reason is None


def test_model_selector_rejects_model_without_capability() -> None:
    selection = ModelSelector().select("imagen-4.0-generate-001", "video")
    assert selection.model.name == "veo-2.0-generate-001"
    assert selection.fallback_reason is not None


def test_model_selector_raises_when_no_models_for_capability() -> None:
    registry = ModelRegistry({"text-only": ModelSpec(name="text-only", provider="dryrun", capabilities=("text",))})
    selector = ModelSelector(registry)
    with pytest.raises(RuntimeError, match="No models available for capability 'image'."):
        selector.select("imagen-4.0-generate-001", "image")


def test_provider_registry_lists_names_sorted() -> None:
    registry = ProviderRegistry([_DummyProvider("gemini"), _DummyProvider("dryrun")])
    assert registry.list() == ["dryrun", "gemini"]
    assert registry.get("missing") is None


class _DummyProvider:
    def __init__(self, name: str) -> None:
        self.name = name
