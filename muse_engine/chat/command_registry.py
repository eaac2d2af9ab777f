"""Slash-command metadata shared by the parser and the help text."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    command: str
    usage: str
    help: str


SLASH_COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec("attach", "/attach <image_path>", "Attach an image to the next chat message"),
    CommandSpec("detach", "/detach", "Drop the pending image attachment"),
    CommandSpec("mic", "/mic", "Toggle voice input"),
    CommandSpec("login", "/login <email> <password>", "Sign in and load your history"),
    CommandSpec("logout", "/logout", "Sign out"),
    CommandSpec("help", "/help", "Show help"),
    CommandSpec("quit", "/quit", "Exit"),
)

SLASH_COMMAND_MAP = {spec.command: spec for spec in SLASH_COMMANDS}

GENERATION_USAGE_LINES: tuple[str, ...] = (
    "generate <prompt> [--aspect-ratio 1:1|3:4|4:3|9:16|16:9]",
    "generate video [of] <prompt> [--duration <seconds>]",
)


def help_text() -> str:
    lines = ["Commands:"]
    for spec in SLASH_COMMANDS:
        lines.append(f"  {spec.usage:<28} {spec.help}")
    lines.append("Generation:")
    for usage in GENERATION_USAGE_LINES:
        lines.append(f"  {usage}")
    return "\n".join(lines)
