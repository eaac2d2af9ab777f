"""Failure taxonomy and the reporter that surfaces failures to the user."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .chat.messages import Message
    from .render import Placeholder
    from .runs.events import EventWriter


UNKNOWN_ERROR_TEXT = "An unknown error occurred. Please check the event log."

INVALID_PARAMETER = "invalid_parameter"
GENERATION_EMPTY = "generation_empty"
DOWNLOAD_FAILED = "download_failed"
STREAM_OR_API_ERROR = "stream_or_api_error"


class MuseError(RuntimeError):
    kind = STREAM_OR_API_ERROR


class InvalidParameterError(MuseError, ValueError):
    """Unsupported flag value; raised before any network call."""

    kind = INVALID_PARAMETER


class GenerationEmptyError(MuseError):
    """The model answered but produced no usable media."""

    kind = GENERATION_EMPTY


class DownloadFailedError(MuseError):
    kind = DOWNLOAD_FAILED


def classify_error(exc: BaseException) -> str:
    if isinstance(exc, MuseError):
        return exc.kind
    return STREAM_OR_API_ERROR


def error_text(exc: BaseException) -> str:
    # google-genai APIError carries the upstream text on ``message``.
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    text = str(exc).strip()
    return text or UNKNOWN_ERROR_TEXT


class ErrorReporter:
    def __init__(self, events: EventWriter) -> None:
        self.events = events

    def report(
        self,
        exc: BaseException,
        *,
        action: str,
        placeholder: Placeholder,
        conversation: list[Message] | None = None,
        user_message: Message | None = None,
    ) -> dict[str, Any]:
        kind = classify_error(exc)
        message = error_text(exc)
        rolled_back = False
        if conversation is not None and user_message is not None:
            rolled_back = rollback(conversation, user_message)
        event = self.events.emit(
            "error",
            action=action,
            kind=kind,
            message=message,
            exception=type(exc).__name__,
            rolled_back=rolled_back,
        )
        placeholder.fail(message)
        return event


def rollback(conversation: list[Message], user_message: Message) -> bool:
    """Remove ``user_message`` from the conversation.

    Matches by identity, newest first, so an equal-looking earlier turn is
    never touched.
    """
    for idx in range(len(conversation) - 1, -1, -1):
        if conversation[idx] is user_message:
            del conversation[idx]
            return True
    return False
