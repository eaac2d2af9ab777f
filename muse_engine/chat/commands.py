"""Discrete commands delivered to the engine by any front end."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Submit:
    text: str


@dataclass(frozen=True)
class UploadImage:
    path: str


@dataclass(frozen=True)
class ClearImage:
    pass


@dataclass(frozen=True)
class ToggleMic:
    pass


@dataclass(frozen=True)
class Login:
    email: str
    password: str


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class ShowHelp:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Invalid:
    usage: str


Command = Submit | UploadImage | ClearImage | ToggleMic | Login | Logout | ShowHelp | Quit | Invalid
