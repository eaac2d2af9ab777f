from __future__ import annotations

import pytest

from muse_engine.errors import InvalidParameterError
from muse_engine.providers.base import ImageGenerationConfig, VideoGenerationConfig, parse_duration


def test_image_config_defaults() -> None:
    config = ImageGenerationConfig.from_params({})
    assert config.as_kwargs() == {"number_of_images": 1, "output_mime_type": "image/jpeg"}


def test_image_config_accepts_supported_ratio() -> None:
    config = ImageGenerationConfig.from_params({"aspect-ratio": "9:16"})
    assert config.as_kwargs()["aspect_ratio"] == "9:16"


def test_image_config_rejects_unsupported_ratio() -> None:
    with pytest.raises(InvalidParameterError) as excinfo:
        ImageGenerationConfig.from_params({"aspect-ratio": "2:1"})
    assert str(excinfo.value) == 'Invalid aspect ratio "2:1". Supported values are: 1:1, 3:4, 4:3, 9:16, 16:9.'


def test_image_config_ignores_unknown_flags() -> None:
    config = ImageGenerationConfig.from_params({"style": "noir"})
    assert config.aspect_ratio is None


def test_video_config_duration() -> None:
    config = VideoGenerationConfig.from_params({"duration": "5"})
    assert config.as_kwargs() == {"number_of_videos": 1, "duration_seconds": 5}


def test_video_config_without_duration() -> None:
    assert VideoGenerationConfig.from_params({}).as_kwargs() == {"number_of_videos": 1}


@pytest.mark.parametrize("raw", ["0", "-3", "abc", "5s", "2.5", "5_0", "\u0665"])
def test_parse_duration_rejects_non_positive_integers(raw: str) -> None:
    with pytest.raises(InvalidParameterError, match="Please provide a positive number of seconds"):
        parse_duration(raw)


def test_invalid_duration_message_quotes_raw_value() -> None:
    with pytest.raises(InvalidParameterError) as excinfo:
        VideoGenerationConfig.from_params({"duration": "abc"})
    assert str(excinfo.value).startswith('Invalid duration "abc".')
