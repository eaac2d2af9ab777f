"""Flag parsing for generation prompts."""

from __future__ import annotations

import re

FLAG_DELIMITER = " --"

_WHITESPACE = re.compile(r"\s")


def parse_generation_prompt(text: str) -> tuple[str, dict[str, str]]:
    """Split ``a cat --aspect-ratio 1:1`` into ``("a cat", {"aspect-ratio": "1:1"})``.

    Malformed flags are dropped silently. A repeated flag keeps its last value.
    """
    segments = text.split(FLAG_DELIMITER)
    main_prompt = segments[0].strip()
    params: dict[str, str] = {}
    for segment in segments[1:]:
        match = _WHITESPACE.search(segment)
        if match is None:
            continue
        key = segment[: match.start()].strip()
        value = segment[match.end():].strip()
        if key and value:
            params[key] = value
    return main_prompt, params
