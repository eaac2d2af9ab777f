"""Parse terminal input into commands and route prompts to a pathway."""

from __future__ import annotations

import re
import shlex

from .command_registry import SLASH_COMMAND_MAP
from .commands import (
    ClearImage,
    Command,
    Invalid,
    Login,
    Logout,
    Quit,
    ShowHelp,
    Submit,
    ToggleMic,
    UploadImage,
)
from .intent_schema import (
    CHAT,
    GENERATE_IMAGE,
    GENERATE_VIDEO,
    GENERATION_USAGE,
    NOOP,
    Intent,
)
from .params import parse_generation_prompt

GENERATE_PREFIXES = ("generate ", "/generate ")

_SLASH_PATTERN = re.compile(r"^/(\w+)(?:\s+(.*))?$", re.DOTALL)
_VIDEO_PREFIX = re.compile(r"^video\s(of\s)?", re.IGNORECASE)


def _parse_args(arg: str) -> list[str]:
    if not arg:
        return []
    try:
        parts = shlex.split(arg)
    except ValueError:
        parts = arg.split()
    return [part for part in parts if part]


def parse_command(line: str) -> Command:
    raw = line.strip()
    match = _SLASH_PATTERN.match(raw)
    if not match:
        return Submit(text=line)
    spec = SLASH_COMMAND_MAP.get(match.group(1).lower())
    if spec is None:
        # /generate and unknown slash words are ordinary prompts.
        return Submit(text=line)
    args = _parse_args((match.group(2) or "").strip())
    if spec.command == "attach":
        if not args:
            return Invalid(usage=spec.usage)
        return UploadImage(path=" ".join(args))
    if spec.command == "login":
        if len(args) != 2:
            return Invalid(usage=spec.usage)
        return Login(email=args[0], password=args[1])
    simple = {
        "detach": ClearImage,
        "mic": ToggleMic,
        "logout": Logout,
        "help": ShowHelp,
        "quit": Quit,
    }
    return simple[spec.command]()


def match_generate_prefix(text: str) -> str | None:
    # A bare "generate" arrives trimmed; it is still the command with no prompt.
    lowered = f"{text} ".lower()
    for prefix in GENERATE_PREFIXES:
        if lowered.startswith(prefix):
            return prefix
    return None


def route_prompt(text: str, has_image: bool = False) -> Intent:
    """Classify a trimmed prompt as chat, image or video generation."""
    raw = text.strip()
    if not raw and not has_image:
        return Intent(action=NOOP, raw=text)
    prefix = match_generate_prefix(raw)
    if prefix is None or has_image:
        return Intent(action=CHAT, raw=raw, prompt=raw)

    generation_prompt = raw[len(prefix) :].strip()
    if not generation_prompt:
        return Intent(action=GENERATION_USAGE, raw=raw)

    main_prompt, params = parse_generation_prompt(generation_prompt)
    if main_prompt.lower().startswith("video"):
        video_prompt = _VIDEO_PREFIX.sub("", main_prompt, count=1).strip()
        return Intent(action=GENERATE_VIDEO, raw=raw, prompt=video_prompt, params=params)
    return Intent(action=GENERATE_IMAGE, raw=raw, prompt=main_prompt, params=params)
