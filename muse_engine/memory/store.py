"""SQLite-backed key/value store and per-identity conversation history."""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from ..chat.messages import Message, build_context, from_persisted, greeting_message, to_persisted
from ..utils import MUSE_HOME, ensure_dir, loads_json, now_utc_iso


DB_PATH = MUSE_HOME / "store.sqlite"
USER_STORAGE_KEY = "muse-chat-user"
HISTORY_STORAGE_PREFIX = "muse-chat-history-"


@dataclass
class KeyValueStore:
    path: Path = DB_PATH

    def connect(self) -> sqlite3.Connection:
        ensure_dir(self.path.parent)
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        with closing(self.connect()) as conn, conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT
                );
                """
            )

    def get(self, key: str) -> str | None:
        with closing(self.connect()) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row["value"])

    def set(self, key: str, value: str) -> None:
        with closing(self.connect()) as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, now_utc_iso()),
            )

    def delete(self, key: str) -> None:
        with closing(self.connect()) as conn, conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def keys(self, prefix: str = "") -> list[str]:
        with closing(self.connect()) as conn:
            rows = conn.execute(
                "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [str(row["key"]) for row in rows]


@dataclass
class LoadedHistory:
    messages: list[Message]
    context: list[dict[str, Any]] = field(default_factory=list)
    initialized: bool = False


class HistoryStore:
    """One persisted conversation per identity.

    Snapshots are JSON lists of ``{"role", "text", "imageData"?}``; video
    handles are dropped on save because they do not outlive the session.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    @staticmethod
    def storage_key(identity: str | None) -> str | None:
        if not identity:
            return None
        return f"{HISTORY_STORAGE_PREFIX}{identity}"

    def save(self, identity: str | None, conversation: Iterable[Message]) -> bool:
        key = self.storage_key(identity)
        if key is None:
            return False
        payload = [to_persisted(message) for message in conversation]
        self.kv.set(key, json.dumps(payload))
        return True

    def read(self, identity: str | None) -> list[Message] | None:
        key = self.storage_key(identity)
        if key is None:
            return None
        payload = loads_json(self.kv.get(key), None)
        if not isinstance(payload, list):
            return None
        messages = [from_persisted(item) for item in payload]
        return [message for message in messages if message is not None]

    def load(self, identity: str | None) -> LoadedHistory | None:
        if self.storage_key(identity) is None:
            return None
        messages = self.read(identity)
        if messages:
            return LoadedHistory(messages=messages, context=build_context(messages))
        greeting = [greeting_message()]
        self.save(identity, greeting)
        return LoadedHistory(messages=greeting, initialized=True)

    def identities(self) -> list[str]:
        return [key[len(HISTORY_STORAGE_PREFIX) :] for key in self.kv.keys(HISTORY_STORAGE_PREFIX)]


class IdentityStore:
    """Remembers which identity is signed in across restarts."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def current(self) -> str | None:
        return self.kv.get(USER_STORAGE_KEY) or None

    def remember(self, identity: str) -> None:
        self.kv.set(USER_STORAGE_KEY, identity)

    def forget(self) -> None:
        self.kv.delete(USER_STORAGE_KEY)
