"""Provider registry."""

from __future__ import annotations

from pathlib import Path

from .base import ProviderRegistry
from .dryrun import DryRunProvider
from .gemini import GeminiProvider


def default_registry(media_dir: Path | None = None) -> ProviderRegistry:
    return ProviderRegistry(
        [
            DryRunProvider(out_dir=media_dir),
            GeminiProvider(),
        ]
    )
