"""Thin AnkiConnect client plus the payload builders used around it.

AnkiConnect listens on http://localhost:8765 while Anki is running and
answers ``{"result": ..., "error": ...}`` for every action.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

import httpx

from .segment import CardDraft

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8765"
API_VERSION = 6

EXPRESSION_FIELD = "Expression"
MEANING_FIELD = "Meaning"
EXPLANATION_FIELD = "RussianExplanation"
AUDIO_FIELD = "Audio"
NOTE_TAGS = ["greek", "elevenlabs"]


class AnkiConnectError(RuntimeError):
    """AnkiConnect answered with a non-null ``error``."""


def _quote_query_value(text: str) -> str:
    return text.replace('"', '\\"')


def build_duplicate_query(
    expressions: Iterable[str],
    deck_name: Optional[str] = None,
    field: str = EXPRESSION_FIELD,
) -> str:
    """Build one findNotes query OR-ing an exact field match per expression."""
    parts = [f'({field}:"{_quote_query_value(e)}")' for e in expressions]
    deck_filter = f'deck:"{_quote_query_value(deck_name)}" ' if deck_name else ""
    return f"{deck_filter}({' OR '.join(parts)})"


def _to_html(text: str) -> str:
    return (text or "").replace("\n", "<br>")


def build_note(
    card: CardDraft,
    deck_name: str = "Default",
    model_name: str = "Basic",
    audio: Optional[bytes] = None,
) -> Dict[str, Any]:
    """Build the ``note`` parameter of an addNote call for one card."""
    note: Dict[str, Any] = {
        "deckName": deck_name,
        "modelName": model_name,
        "fields": {
            EXPRESSION_FIELD: card.script,
            MEANING_FIELD: _to_html(card.translation),
            EXPLANATION_FIELD: _to_html(card.annotation),
            # Filled in by AnkiConnect from the audio entry below.
            AUDIO_FIELD: "",
        },
        "tags": list(NOTE_TAGS),
    }
    if audio:
        note["audio"] = [
            {
                "data": base64.b64encode(audio).decode("ascii"),
                "filename": f"greek_{card.id}.mp3",
                "fields": [AUDIO_FIELD],
            }
        ]
    return note


class AnkiConnectClient:
    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self._http = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "AnkiConnectClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def invoke(self, action: str, **params: Any) -> Any:
        """Run one AnkiConnect action and return its ``result``.

        Raises:
            httpx.HTTPError: Transport failure or non-2xx status
            AnkiConnectError: AnkiConnect reported an error
        """
        payload: Dict[str, Any] = {"action": action, "version": API_VERSION}
        if params:
            payload["params"] = params
        response = self._http.post(self.url, json=payload)
        response.raise_for_status()
        body = response.json()
        if body.get("error") is not None:
            raise AnkiConnectError(str(body["error"]))
        return body.get("result")

    def version(self) -> int:
        return int(self.invoke("version") or 0)

    def find_notes(self, query: str) -> List[int]:
        return list(self.invoke("findNotes", query=query) or [])

    def notes_info(self, note_ids: List[int]) -> List[Dict[str, Any]]:
        return list(self.invoke("notesInfo", notes=note_ids) or [])

    def add_note(self, note: Dict[str, Any]) -> Optional[int]:
        return self.invoke("addNote", note=note)

    def find_existing_expressions(
        self,
        expressions: Iterable[str],
        deck_name: Optional[str] = None,
        field: str = EXPRESSION_FIELD,
    ) -> Set[str]:
        """Return the field values of existing notes matching any expression."""
        expressions = list(expressions)
        if not expressions:
            return set()
        logger.info("Batch checking %d expressions for duplicates", len(expressions))
        note_ids = self.find_notes(build_duplicate_query(expressions, deck_name, field))
        if not note_ids:
            return set()
        existing: Set[str] = set()
        for info in self.notes_info(note_ids):
            value = info.get("fields", {}).get(field, {}).get("value")
            if value is not None:
                existing.add(value)
        return existing


def check_connection(client: AnkiConnectClient) -> Dict[str, Any]:
    """Report whether AnkiConnect is reachable, never raising."""
    try:
        return {"connected": True, "version": client.version()}
    except httpx.ConnectError as e:
        return {
            "connected": False,
            "error": "Cannot connect to AnkiConnect. Is Anki running?",
            "details": str(e),
        }
    except httpx.HTTPStatusError as e:
        return {"connected": False, "error": f"HTTP {e.response.status_code}: {e.response.text}"}
    except AnkiConnectError as e:
        return {"connected": False, "error": f"AnkiConnect error: {e}"}
    except (httpx.HTTPError, ValueError) as e:
        return {"connected": False, "error": str(e), "type": type(e).__name__}
