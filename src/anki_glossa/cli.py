"""CLI entrypoint for Anki-Glossa.

Usage:
  anki-glossa parse --input lesson.txt --out out/cards.csv
  anki-glossa check-duplicates --session <id> --export resources/Greek.txt
  anki-glossa push --session <id>
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import List

from .anki_connect import AnkiConnectClient, check_connection
from .deck_index import build_from_export
from .detect_duplicates import anki_lookup, check_duplicates
from .explain import GeminiExplainer, explain_cards
from .ingest import read_text
from .publish import create_note, create_notes
from .report import print_cards, print_summary, write_cards_csv
from .segment import segment
from .session_store import CardNotFound, CardPatch, JsonFileCardStore, SessionNotFound
from .tts import DEFAULT_VOICE_ID, ElevenLabsClient

DEFAULT_CONFIG = {
    "anki_connect_url": "http://localhost:8765",
    "deck_name": "Default",
    "model_name": "Basic",
    "elevenlabs_api_key": "",
    "voice_id": DEFAULT_VOICE_ID,
    "gemini_api_key": "",
    "session_dir": "out/sessions",
}

ENV_OVERRIDES = {
    "ELEVENLABS_API_KEY": "elevenlabs_api_key",
    "GEMINI_API_KEY": "gemini_api_key",
    "ANKI_CONNECT_URL": "anki_connect_url",
}


def load_config(path: str | Path) -> dict:
    cfg = dict(DEFAULT_CONFIG)
    path = Path(path)
    if path.exists():
        try:
            cfg.update(json.loads(path.read_text(encoding="utf-8")))
        except ValueError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            cfg[key] = value
    return cfg


def _store(args: argparse.Namespace, cfg: dict) -> JsonFileCardStore:
    return JsonFileCardStore(args.session_dir or cfg["session_dir"])


def cmd_parse(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    try:
        text = read_text(args.input)
    except OSError as e:
        print(f"Error: {e}")
        return 1

    cards = segment(text)
    if not cards:
        print("Error: no cards recognized")
        return 1

    store = _store(args, cfg)
    session_id = store.new_session_id()
    store.put(session_id, cards)

    print_cards(cards)
    print()
    print_summary(cards)
    if args.out:
        write_cards_csv(args.out, cards)
        print(f"Wrote cards: {args.out}")
    print(f"Session: {session_id}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    try:
        cards = _store(args, cfg).get(args.session)
    except SessionNotFound as e:
        print(f"Error: {e.args[0]}")
        return 1
    print_cards(cards)
    if args.out:
        write_cards_csv(args.out, cards)
        print(f"Wrote cards: {args.out}")
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    patch = CardPatch(
        translation=args.translation.replace("\\n", "\n") if args.translation is not None else None,
        annotation=args.annotation.replace("\\n", "\n") if args.annotation is not None else None,
        selected=args.selected,
    )
    try:
        card = _store(args, cfg).update(args.session, args.card, patch)
    except (SessionNotFound, CardNotFound) as e:
        print(f"Error: {e.args[0]}")
        return 1
    print_cards([card])
    return 0


def cmd_check_duplicates(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    store = _store(args, cfg)
    try:
        cards = store.get(args.session)
    except SessionNotFound as e:
        print(f"Error: {e.args[0]}")
        return 1

    if args.export:
        print(f"Loading deck from: {args.export}")
        index = build_from_export(args.export, deck_name=args.deck)
        print(f"Loaded {len(index.notes)} notes from export")
        duplicates = check_duplicates(cards, index.lookup)
    else:
        with AnkiConnectClient(args.anki_url or cfg["anki_connect_url"]) as client:
            duplicates = check_duplicates(cards, anki_lookup(client, args.deck))

    store.put(args.session, cards)
    print_summary(cards, duplicates=duplicates)
    if args.out:
        write_cards_csv(args.out, cards, duplicates)
        print(f"Wrote report: {args.out}")
    return 0


def cmd_explain(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    if not cfg["gemini_api_key"]:
        print("Error: Gemini API key is required (config gemini_api_key or GEMINI_API_KEY)")
        return 1
    store = _store(args, cfg)
    try:
        cards = store.get(args.session)
    except SessionNotFound as e:
        print(f"Error: {e.args[0]}")
        return 1

    explainer = GeminiExplainer(cfg["gemini_api_key"])
    try:
        outcomes = explain_cards([c for c in cards if c.selected], explainer, overwrite=args.overwrite)
    finally:
        explainer.close()
    store.put(args.session, cards)

    failed = [o for o in outcomes.values() if o.is_unknown]
    print(f"Explained {len(outcomes) - len(failed)} cards")
    if failed:
        print(f"  Failed: {len(failed)} ({failed[0].error})")
    return 0


def cmd_push(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    try:
        cards = _store(args, cfg).get(args.session)
    except SessionNotFound as e:
        print(f"Error: {e.args[0]}")
        return 1
    if args.card:
        cards = [c for c in cards if c.id == args.card]
        if not cards:
            print(f"Error: Card {args.card} not found in session {args.session}")
            return 1

    tts = None
    if not args.no_audio and cfg["elevenlabs_api_key"]:
        tts = ElevenLabsClient(cfg["elevenlabs_api_key"])
    try:
        options = dict(
            tts=tts,
            deck_name=args.deck or cfg["deck_name"],
            model_name=args.model or cfg["model_name"],
            voice_id=cfg["voice_id"],
        )
        with AnkiConnectClient(args.anki_url or cfg["anki_connect_url"]) as anki:
            if args.card:
                # A single explicitly named card is created even if deselected.
                results = [create_note(cards[0], anki, **options)]
            else:
                results = create_notes(cards, anki, **options)
    finally:
        if tts is not None:
            tts.close()

    print_summary(cards, results=results)
    return 0 if all(r.success for r in results) else 1


def cmd_anki_test(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    with AnkiConnectClient(args.anki_url or cfg["anki_connect_url"]) as client:
        status = check_connection(client)
    if status["connected"]:
        print(f"AnkiConnect version: {status['version']}")
        return 0
    print(f"Error: {status['error']}")
    if status.get("details"):
        print(f"  {status['details']}")
    return 1


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        default="resources/config.json",
        help="Path to config.json (optional; defaults will be used if missing)",
    )
    p.add_argument("--session-dir", help="Directory holding session files (default from config)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="anki-glossa", description="Greek study text to Anki cards")
    p.add_argument("-v", "--verbose", action="store_true", help="Log collaborator calls")
    sub = p.add_subparsers(dest="cmd", required=True)

    parse = sub.add_parser("parse", help="Segment study text into a new card session")
    parse.add_argument("--input", required=True, help="Path to text file ('-' for stdin)")
    parse.add_argument("--out", help="Optional CSV export of the parsed cards")
    _add_common(parse)
    parse.set_defaults(func=cmd_parse)

    show = sub.add_parser("show", help="Print the cards of a session")
    show.add_argument("--session", required=True)
    show.add_argument("--out", help="Optional CSV export")
    _add_common(show)
    show.set_defaults(func=cmd_show)

    edit = sub.add_parser("edit", help="Edit translation, annotation or selection of one card")
    edit.add_argument("--session", required=True)
    edit.add_argument("--card", required=True)
    edit.add_argument("--translation", help="New translation (use \\n for line breaks)")
    edit.add_argument("--annotation", help="New annotation (use \\n for line breaks)")
    sel = edit.add_mutually_exclusive_group()
    sel.add_argument("--select", dest="selected", action="store_const", const=True)
    sel.add_argument("--deselect", dest="selected", action="store_const", const=False)
    _add_common(edit)
    edit.set_defaults(func=cmd_edit, selected=None)

    dup = sub.add_parser("check-duplicates", help="Deselect cards already in the deck")
    dup.add_argument("--session", required=True)
    dup.add_argument("--export", help="Check against a plain-text Anki export instead of AnkiConnect")
    dup.add_argument("--anki-url", help="AnkiConnect URL (default from config)")
    dup.add_argument("--deck", help="Restrict the check to one deck")
    dup.add_argument("--out", help="Optional CSV report")
    _add_common(dup)
    dup.set_defaults(func=cmd_check_duplicates)

    explain = sub.add_parser("explain", help="Generate Russian explanations with Gemini")
    explain.add_argument("--session", required=True)
    explain.add_argument("--overwrite", action="store_true", help="Replace existing annotations")
    _add_common(explain)
    explain.set_defaults(func=cmd_explain)

    push = sub.add_parser("push", help="Create notes in Anki for selected cards")
    push.add_argument("--session", required=True)
    push.add_argument("--card", help="Create only this card")
    push.add_argument("--deck", help="Deck name (default from config)")
    push.add_argument("--model", help="Note type (default from config)")
    push.add_argument("--anki-url", help="AnkiConnect URL (default from config)")
    push.add_argument("--no-audio", action="store_true", help="Skip ElevenLabs audio")
    _add_common(push)
    push.set_defaults(func=cmd_push)

    test = sub.add_parser("anki-test", help="Check that AnkiConnect is reachable")
    test.add_argument("--anki-url", help="AnkiConnect URL (default from config)")
    _add_common(test)
    test.set_defaults(func=cmd_anki_test)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
