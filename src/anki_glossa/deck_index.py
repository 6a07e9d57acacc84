"""Expression index built from a plain-text Anki export.

Lets duplicate checks run offline against "Notes in Plain Text" exports
instead of a live AnkiConnect session.
"""

from __future__ import annotations

import html as html_lib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Set

from .normalize import normalize_text_nfc


@dataclass
class NoteEntry:
    note_id: str
    model: str
    deck: str
    expression: str


@dataclass
class ExpressionIndex:
    expressions: Dict[str, Set[str]] = field(default_factory=dict)
    notes: List[NoteEntry] = field(default_factory=list)

    def add_note(self, note: NoteEntry) -> None:
        self.notes.append(note)
        key = normalize_text_nfc(note.expression).strip()
        if key:
            self.expressions.setdefault(key, set()).add(note.note_id)

    def contains(self, text: str) -> bool:
        return normalize_text_nfc(text).strip() in self.expressions

    def lookup(self, expressions: Iterable[str]) -> Set[str]:
        """Return the subset of ``expressions`` already present in the deck."""
        return {e for e in expressions if self.contains(e)}


_SOUND_RE = re.compile(r"\[sound:[^\]]+\]")
_TAG_RE = re.compile(r"<[^>]+>")


def _clean_field_text(text: str) -> str:
    if not text:
        return ""
    t = _SOUND_RE.sub(" ", text)
    t = _TAG_RE.sub(" ", t)
    t = html_lib.unescape(t)
    return " ".join(t.split())


def build_from_export(
    export_path: str | Path,
    expression_index: int = 0,
    deck_name: str | None = None,
) -> ExpressionIndex:
    """Parse a tab-separated Anki export with header comments and build index.

    Expected header hints:
      - #separator:tab
      - #guid column:1
      - #notetype column:2
      - #deck column:3
      - #tags column:N
    Fields are assumed to be all columns after deck and before the tags column.
    ``expression_index`` picks the field holding the Greek expression;
    ``deck_name`` restricts the index to one deck.
    """
    export_path = Path(export_path)
    index = ExpressionIndex()
    if not export_path.exists():
        return index

    tags_col = None
    with export_path.open("r", encoding="utf-8") as f:
        for line in f:
            if line.startswith("#"):
                if line.lower().startswith("#tags column:"):
                    try:
                        tags_col = int(line.split(":", 1)[1].strip())
                    except ValueError:
                        tags_col = None
                continue
            parts = line.rstrip("\n").split("\t")
            if len(parts) < 4:
                continue
            guid = parts[0].strip().strip('"')
            model = parts[1].strip()
            deck = parts[2].strip()
            if deck_name and deck != deck_name:
                continue
            if tags_col and 0 < tags_col <= len(parts):
                tags_idx0 = tags_col - 1
            else:
                tags_idx0 = len(parts) - 1
            field_values = parts[3:tags_idx0]
            if expression_index >= len(field_values):
                continue
            expression = _clean_field_text(field_values[expression_index])
            index.add_note(NoteEntry(note_id=guid, model=model, deck=deck, expression=expression))

    return index
