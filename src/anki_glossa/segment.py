"""Line-pair segmentation of pasted study text into card drafts.

Input is expected as alternating lines:

  Χαίρε! hello        <- Greek text followed by its English gloss
  Привет              <- annotation line (usually Russian)

Each first line is split at the script/gloss boundary, joined with the line
after it and emitted as one ``CardDraft``. Lines without any Greek letter
produce no card and take their annotation line with them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List

from .normalize import BOUNDARY_PUNCTUATION, BOUNDARY_SPACE, is_script_char, normalize_lines


@dataclass
class LineSplit:
    script_span: str
    gloss_span: str


def _new_card_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CardDraft:
    """A parsed card before audio or explanations are attached.

    ``id`` and ``script`` are fixed at segmentation time; ``translation``,
    ``annotation`` and ``selected`` may be edited afterwards.
    """

    script: str
    translation: str = ""
    annotation: str = ""
    selected: bool = True
    id: str = field(default_factory=_new_card_id)


def split_line(line: str) -> LineSplit:
    """Split one normalized line into its script span and trailing gloss.

    The boundary is anchored on the *last* script character, so anything in
    front of the first Greek letter stays in the script span.
    """
    last_script = -1
    for idx, ch in enumerate(line):
        if is_script_char(ch):
            last_script = idx

    if last_script < 0:
        return LineSplit(script_span="", gloss_span=line)

    boundary = last_script
    for idx in range(last_script + 1, len(line)):
        ch = line[idx]
        if ch in BOUNDARY_PUNCTUATION:
            boundary = idx
        elif ch != BOUNDARY_SPACE:
            break

    script = line[: boundary + 1].strip()
    gloss = line[boundary + 1 :].strip()
    return LineSplit(script_span=script, gloss_span=gloss)


def compose_translation(gloss: str, annotation_line: str) -> str:
    """Join the gloss and the annotation line with a single newline."""
    if not annotation_line:
        return gloss
    if not gloss:
        return annotation_line
    return f"{gloss}\n{annotation_line}"


def segment(text: str | None) -> List[CardDraft]:
    """Segment raw study text into an ordered list of card drafts.

    Never raises; text without any recognizable Greek yields an empty list.
    """
    lines = normalize_lines(text)
    cards: List[CardDraft] = []
    for i in range(0, len(lines), 2):
        split = split_line(lines[i])
        if not split.script_span:
            continue
        annotation_line = lines[i + 1] if i + 1 < len(lines) else ""
        cards.append(
            CardDraft(
                script=split.script_span,
                translation=compose_translation(split.gloss_span, annotation_line),
            )
        )
    return cards
