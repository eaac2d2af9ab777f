"""Muse CLI entrypoints."""

from __future__ import annotations

import argparse
from pathlib import Path

from .chat.intent_parser import parse_command
from .chat.messages import USER
from .engine import MuseEngine
from .memory.store import DB_PATH, HistoryStore, KeyValueStore
from .models.registry import DRYRUN_MODELS, IMAGE, TEXT, VIDEO
from .utils import MUSE_HOME, getenv_flag, getenv_path, load_dotenv

DEFAULT_EVENTS_PATH = MUSE_HOME / "events.jsonl"
DEFAULT_MEDIA_DIR = MUSE_HOME / "media"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="muse", description="Gemini chat with inline image and video generation")
    sub = parser.add_subparsers(dest="command")

    chat = sub.add_parser("chat", help="Interactive chat loop")
    chat.add_argument("--store", help="Path to the sqlite history store")
    chat.add_argument("--events", help="Path to events.jsonl")
    chat.add_argument("--media-dir", dest="media_dir", help="Directory for generated media")
    chat.add_argument("--text-model", dest="text_model")
    chat.add_argument("--image-model", dest="image_model")
    chat.add_argument("--video-model", dest="video_model")
    chat.add_argument("--dry-run", dest="dry_run", action="store_true", help="Use the offline dryrun provider")

    history = sub.add_parser("history", help="Print a stored conversation")
    history.add_argument("--user", help="Identity whose history to print")
    history.add_argument("--store", help="Path to the sqlite history store")

    return parser


def _store_path(args: argparse.Namespace) -> Path:
    if args.store:
        return Path(args.store).expanduser()
    return getenv_path("MUSE_STORE", DB_PATH)


def _handle_chat(args: argparse.Namespace) -> int:
    events_path = Path(args.events).expanduser() if args.events else DEFAULT_EVENTS_PATH
    media_dir = Path(args.media_dir).expanduser() if args.media_dir else getenv_path("MUSE_MEDIA_DIR", DEFAULT_MEDIA_DIR)
    dry_run = args.dry_run or getenv_flag("MUSE_DRYRUN")
    engine = MuseEngine(
        _store_path(args),
        events_path,
        media_dir,
        text_model=args.text_model or (DRYRUN_MODELS[TEXT] if dry_run else None),
        image_model=args.image_model or (DRYRUN_MODELS[IMAGE] if dry_run else None),
        video_model=args.video_model or (DRYRUN_MODELS[VIDEO] if dry_run else None),
    )
    print("Muse chat started. Type /help for commands.")
    engine.start()

    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            break
        if not engine.dispatch(parse_command(line)):
            break
    return 0


def _handle_history(args: argparse.Namespace) -> int:
    kv = KeyValueStore(_store_path(args))
    kv.init_db()
    history = HistoryStore(kv)
    if not args.user:
        identities = history.identities()
        if not identities:
            print("No stored conversations.")
        for identity in identities:
            print(identity)
        return 0
    messages = history.read(args.user)
    if messages is None:
        print(f"No history for {args.user}")
        return 1
    for message in messages:
        label = "you" if message.role == USER else "model"
        suffix = f" [image {message.image_data.mime_type}]" if message.image_data else ""
        print(f"{label}> {message.text}{suffix}")
    return 0


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    if args.command == "chat":
        raise SystemExit(_handle_chat(args))
    if args.command == "history":
        raise SystemExit(_handle_history(args))
    parser.print_help()
    raise SystemExit(1)


if __name__ == "__main__":
    main()
