"""Core Muse engine orchestration."""

from __future__ import annotations

import base64
import mimetypes
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Callable

from .chat.commands import (
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
from .chat.command_registry import help_text
from .chat.intent_parser import route_prompt
from .chat.intent_schema import CHAT, GENERATE_VIDEO, GENERATION_USAGE, NOOP, Intent
from .chat.messages import MODEL, USER, ImageData, Message
from .chat.session import ChatSession
from .errors import ErrorReporter, classify_error
from .media.fetch import FetchResult, fetch_url
from .media.orchestrator import POLL_INTERVAL_S, MediaGenerationOrchestrator
from .memory.store import HistoryStore, IdentityStore, KeyValueStore
from .models.registry import IMAGE, TEXT, VIDEO, ModelRegistry, ModelSpec
from .models.selectors import ModelSelector
from .providers import default_registry
from .providers.base import MediaProvider, ProviderRegistry
from .render import ConsoleRenderer, Placeholder, Renderer
from .runs.events import EventWriter
from .session import SessionState

GENERATION_USAGE_TEXT = (
    "Please provide a prompt for generation. Usage: `generate a cat` or `generate video of a cat`"
)
CHAT_STATUS = "Thinking..."


class MuseEngine:
    """Owns the session state and routes every command to its pathway.

    Collaborators (providers, storage, renderer, fetch, sleep) are injected so
    the whole flow runs against fakes in tests.
    """

    def __init__(
        self,
        store_path: Path,
        events_path: Path,
        media_dir: Path,
        renderer: Renderer | None = None,
        text_model: str | None = None,
        image_model: str | None = None,
        video_model: str | None = None,
        provider_registry: ProviderRegistry | None = None,
        model_registry: ModelRegistry | None = None,
        fetch: Callable[[str], FetchResult] = fetch_url,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval_s: float = POLL_INTERVAL_S,
        speech_available: bool = False,
    ) -> None:
        self.session_id = str(uuid.uuid4())
        self.events = EventWriter(events_path, self.session_id)
        self.kv = KeyValueStore(store_path)
        self.kv.init_db()
        self.history = HistoryStore(self.kv)
        self.identities = IdentityStore(self.kv)
        self.media_dir = media_dir
        self.renderer = renderer or ConsoleRenderer(media_dir)
        self.reporter = ErrorReporter(self.events)
        self.state = SessionState()
        self.speech_available = speech_available

        self.providers = provider_registry or default_registry(media_dir)
        self.model_selector = ModelSelector(model_registry or ModelRegistry())
        self.text_model = self._select_model(text_model, TEXT)
        self.image_model = self._select_model(image_model, IMAGE)
        self.video_model = self._select_model(video_model, VIDEO)

        self.chat = self._new_chat()
        self.media = MediaGenerationOrchestrator(
            image_provider=self._provider_for(self.image_model),
            video_provider=self._provider_for(self.video_model),
            image_model=self.image_model.name,
            video_model=self.video_model.name,
            events=self.events,
            media_dir=media_dir,
            fetch=fetch,
            sleep=sleep,
            poll_interval_s=poll_interval_s,
        )

    def _select_model(self, requested: str | None, capability: str) -> ModelSpec:
        selection = self.model_selector.select(requested, capability)
        if selection.fallback_reason:
            self.events.emit(
                "model_fallback",
                capability=capability,
                requested=requested,
                model=selection.model.name,
                reason=selection.fallback_reason,
            )
        return selection.model

    def _provider_for(self, model: ModelSpec) -> MediaProvider:
        provider = self.providers.get(model.provider)
        if provider is None:
            raise RuntimeError(f"No provider available for {model.provider}")
        return provider

    def _new_chat(self, context: list[dict] | None = None) -> ChatSession:
        return ChatSession(self._provider_for(self.text_model), self.text_model.name, history=context)

    # Lifecycle

    def start(self) -> None:
        self.events.emit(
            "session_started",
            text_model=self.text_model.name,
            image_model=self.image_model.name,
            video_model=self.video_model.name,
        )
        identity = self.identities.current()
        if identity:
            self.state.identity = identity
            self.load_history()
        else:
            self.renderer.notice("Not signed in; history will not be saved. Use /login <email> <password>.")

    def dispatch(self, command: Command) -> bool:
        """Apply one command; returns False when the session should end."""
        if isinstance(command, Quit):
            self.events.emit("session_finished")
            return False
        if isinstance(command, Submit):
            self.submit(command.text)
        elif isinstance(command, UploadImage):
            self.upload_image(command.path)
        elif isinstance(command, ClearImage):
            self.clear_image()
        elif isinstance(command, ToggleMic):
            self.toggle_mic()
        elif isinstance(command, Login):
            self.login(command.email, command.password)
        elif isinstance(command, Logout):
            self.logout()
        elif isinstance(command, ShowHelp):
            self.renderer.notice(help_text())
        elif isinstance(command, Invalid):
            self.renderer.notice(f"Usage: {command.usage}")
        return True

    # Identity

    def login(self, email: str, password: str) -> bool:
        # Placeholder auth: any non-empty pair is accepted.
        identity = email.strip()
        if not identity or not password.strip():
            self.renderer.notice("Login requires a non-empty email and password.")
            return False
        self.identities.remember(identity)
        self.state.reset()
        self.state.identity = identity
        self.events.emit("login", identity=identity)
        self.load_history()
        return True

    def logout(self) -> None:
        identity = self.state.identity
        self.identities.forget()
        self.state.reset()
        self.chat = self._new_chat()
        self.renderer.clear()
        self.events.emit("logout", identity=identity)
        self.renderer.notice("Signed out.")

    # History

    def load_history(self) -> None:
        loaded = self.history.load(self.state.identity)
        if loaded is None:
            return
        self.state.conversation = list(loaded.messages)
        self.renderer.clear()
        for message in self.state.conversation:
            self.renderer.render_message(message)
        self.chat = self._new_chat(loaded.context)
        self.events.emit(
            "history_initialized" if loaded.initialized else "history_loaded",
            identity=self.state.identity,
            messages=len(loaded.messages),
        )

    def save_history(self) -> None:
        try:
            saved = self.history.save(self.state.identity, self.state.conversation)
        except sqlite3.Error as exc:
            # The in-memory conversation stays authoritative; the next save retries.
            self.events.emit("error", action="save_history", kind=classify_error(exc), message=str(exc))
            self.renderer.notice(f"Could not save history: {exc}")
            return
        if saved:
            self.events.emit("history_saved", messages=len(self.state.conversation))

    # Input controls

    def upload_image(self, path: str) -> bool:
        if self.state.busy:
            self.renderer.notice("Please wait for the current response to finish.")
            return False
        file_path = Path(path).expanduser()
        if not file_path.is_file():
            self.renderer.notice(f"Attach failed: file not found ({file_path})")
            return False
        mime_type, _ = mimetypes.guess_type(file_path.name)
        if not mime_type or not mime_type.startswith("image/"):
            self.events.emit("attachment_rejected", path=str(file_path), mime_type=mime_type)
            self.renderer.notice("Invalid file type. Please select an image.")
            return False
        encoded = base64.b64encode(file_path.read_bytes()).decode("ascii")
        self.state.attachment = ImageData(base64=encoded, mime_type=mime_type)
        self.events.emit("attachment_set", path=str(file_path), mime_type=mime_type)
        self.renderer.notice(f"Attached {file_path.name}; it will be sent with your next message.")
        return True

    def clear_image(self) -> None:
        self.state.clear_attachment()
        self.renderer.notice("Attachment removed.")

    def toggle_mic(self) -> None:
        if not self.speech_available:
            self.state.recording = False
            self.renderer.notice("Speech recognition not supported")
            return
        self.state.recording = not self.state.recording
        self.renderer.notice("Recording..." if self.state.recording else "Recording stopped.")

    # Prompts

    def submit(self, text: str) -> None:
        if self.state.busy:
            self.renderer.notice("Please wait for the current response to finish.")
            return
        prompt_text = text.strip()
        intent = route_prompt(prompt_text, has_image=self.state.attachment is not None)
        if intent.action == NOOP:
            return
        if intent.action == GENERATION_USAGE:
            self._warn_generation_usage()
            return
        if intent.action == CHAT:
            self._standard_chat(prompt_text)
            return
        self._generate(intent)

    def _warn_generation_usage(self) -> None:
        warning = Message(role=MODEL, text=GENERATION_USAGE_TEXT)
        self.renderer.render_message(warning)
        self.state.append(warning)
        self.save_history()
        self.events.emit("generation_usage_warning")
        self._reset_input()

    def _standard_chat(self, prompt_text: str) -> None:
        image = self.state.attachment
        user_message = Message(role=USER, text=prompt_text, image_data=image)

        def work(placeholder: Placeholder) -> Message:
            self.events.emit(
                "chat_started",
                model=self.text_model.name,
                has_image=image is not None,
                chars=len(prompt_text),
            )
            placeholder.status(CHAT_STATUS)
            reply = self.chat.exchange(prompt_text, image, on_update=placeholder.stream)
            self.events.emit("chat_completed", model=self.text_model.name, chars=len(reply))
            return Message(role=MODEL, text=reply)

        self._run("chat", user_message, work)

    def _generate(self, intent: Intent) -> None:
        user_message = Message(role=USER, text=intent.raw)
        prompt = intent.prompt or ""
        self.events.emit("prompt_routed", action=intent.action, params=intent.params)

        def work(placeholder: Placeholder) -> Message:
            if intent.action == GENERATE_VIDEO:
                return self.media.generate_video(prompt, intent.params, on_status=placeholder.status)
            return self.media.generate_image(prompt, intent.params, on_status=placeholder.status)

        self._run(intent.action, user_message, work)

    def _run(self, action: str, user_message: Message, work: Callable[[Placeholder], Message]) -> None:
        """Push the user turn, run ``work`` and either keep its reply or roll back."""
        self._set_busy(True)
        self.renderer.render_message(user_message)
        self.state.append(user_message)
        placeholder = self.renderer.begin_reply()
        try:
            reply = work(placeholder)
            placeholder.complete(reply)
        except Exception as exc:
            self.reporter.report(
                exc,
                action=action,
                placeholder=placeholder,
                conversation=self.state.conversation,
                user_message=user_message,
            )
        else:
            self.state.append(reply)
            self.save_history()
        finally:
            self._set_busy(False)
            self._reset_input()

    def _set_busy(self, busy: bool) -> None:
        self.state.busy = busy
        self.renderer.set_form_state(busy)

    def _reset_input(self) -> None:
        self.state.clear_attachment()
        self.renderer.reset_input()
