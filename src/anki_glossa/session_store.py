"""Storage for parsed card sessions.

The segmenter returns plain lists; callers that need to keep a session
around between steps (duplicate check, explanations, note creation) put it
in a ``CardStore``. Two stores are provided: an in-memory one guarded by a
lock, and a JSON-file one used by the CLI so separate invocations can share
a session.
"""

from __future__ import annotations

import json
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .segment import CardDraft


class SessionNotFound(KeyError):
    """Raised when a session id has no stored cards."""


class CardNotFound(KeyError):
    """Raised when a card id is not part of the session."""


@dataclass
class CardPatch:
    """Partial update for a stored card. ``None`` leaves a field untouched."""
    translation: Optional[str] = None
    annotation: Optional[str] = None
    selected: Optional[bool] = None

    def apply(self, card: CardDraft) -> CardDraft:
        if self.translation is not None:
            card.translation = self.translation
        if self.annotation is not None:
            card.annotation = self.annotation
        if self.selected is not None:
            card.selected = self.selected
        return card


def _find_card(cards: List[CardDraft], session_id: str, card_id: str) -> CardDraft:
    for card in cards:
        if card.id == card_id:
            return card
    raise CardNotFound(f"Card {card_id} not found in session {session_id}")


class CardStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> List[CardDraft]:
        ...

    @abstractmethod
    def put(self, session_id: str, cards: List[CardDraft]) -> None:
        ...

    @abstractmethod
    def update(self, session_id: str, card_id: str, patch: CardPatch) -> CardDraft:
        ...

    def new_session_id(self) -> str:
        return str(uuid.uuid4())


class InMemoryCardStore(CardStore):
    def __init__(self) -> None:
        self._sessions: Dict[str, List[CardDraft]] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> List[CardDraft]:
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFound(f"Session {session_id} not found")
            return list(self._sessions[session_id])

    def put(self, session_id: str, cards: List[CardDraft]) -> None:
        with self._lock:
            self._sessions[session_id] = list(cards)

    def update(self, session_id: str, card_id: str, patch: CardPatch) -> CardDraft:
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFound(f"Session {session_id} not found")
            card = _find_card(self._sessions[session_id], session_id, card_id)
            return patch.apply(card)


class JsonFileCardStore(CardStore):
    """One ``<session_id>.json`` file per session under ``root``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._lock = threading.Lock()

    def _path(self, session_id: str) -> Path:
        # Session ids become file names verbatim; anything else is rejected.
        safe = "".join(ch for ch in session_id if ch.isalnum() or ch in "-_")
        if not safe or safe != session_id:
            raise SessionNotFound(f"Session {session_id!r} not found")
        return self.root / f"{safe}.json"

    def _read(self, session_id: str) -> List[CardDraft]:
        path = self._path(session_id)
        if not path.exists():
            raise SessionNotFound(f"Session {session_id} not found")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return [CardDraft(**row) for row in data.get("cards", [])]
        except (ValueError, TypeError, AttributeError) as e:
            raise ValueError(f"Corrupt session file {path}: {e}") from e

    def _write(self, session_id: str, cards: List[CardDraft]) -> None:
        path = self._path(session_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"session_id": session_id, "cards": [asdict(c) for c in cards]}
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def get(self, session_id: str) -> List[CardDraft]:
        with self._lock:
            return self._read(session_id)

    def put(self, session_id: str, cards: List[CardDraft]) -> None:
        with self._lock:
            self._write(session_id, list(cards))

    def update(self, session_id: str, card_id: str, patch: CardPatch) -> CardDraft:
        with self._lock:
            cards = self._read(session_id)
            card = patch.apply(_find_card(cards, session_id, card_id))
            self._write(session_id, cards)
            return card
