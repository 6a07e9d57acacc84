"""Create Anki notes from card drafts, with optional audio."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import httpx

from .anki_connect import AnkiConnectClient, AnkiConnectError, build_note
from .outcome import Outcome
from .segment import CardDraft
from .tts import AudioSynthesisError, ElevenLabsClient

logger = logging.getLogger(__name__)

NO_AUDIO = Outcome.unknown(None, "audio not requested")


@dataclass
class CardCreationResult:
    card_id: str
    success: bool
    error: Optional[str] = None
    audio: Outcome = field(default=NO_AUDIO)


def _synthesize(card: CardDraft, tts: Optional[ElevenLabsClient], voice_id: Optional[str]) -> Outcome:
    if tts is None:
        return NO_AUDIO
    try:
        return Outcome.confirmed(tts.synthesize(card.script, voice_id=voice_id))
    except AudioSynthesisError as e:
        logger.warning("Audio failed for %s: %s", card.script, e)
        return Outcome.unknown(None, str(e))


def create_note(
    card: CardDraft,
    anki: AnkiConnectClient,
    tts: Optional[ElevenLabsClient] = None,
    deck_name: str = "Default",
    model_name: str = "Basic",
    voice_id: Optional[str] = None,
) -> CardCreationResult:
    """Add one card to Anki. Failures are reported in the result, not raised."""
    audio = _synthesize(card, tts, voice_id)
    note = build_note(card, deck_name=deck_name, model_name=model_name, audio=audio.value)
    logger.info("Creating card: %s", card.script)
    try:
        note_id = anki.add_note(note)
    except (httpx.HTTPError, AnkiConnectError, ValueError) as e:
        logger.error("Error creating card %s: %s", card.script, e)
        return CardCreationResult(card_id=card.id, success=False, error=str(e), audio=audio)
    success = isinstance(note_id, int) and note_id > 0
    return CardCreationResult(card_id=card.id, success=success, audio=audio)


def create_notes(
    cards: Iterable[CardDraft],
    anki: AnkiConnectClient,
    tts: Optional[ElevenLabsClient] = None,
    deck_name: str = "Default",
    model_name: str = "Basic",
    voice_id: Optional[str] = None,
) -> List[CardCreationResult]:
    """Add every selected card, in order."""
    selected = [c for c in cards if c.selected]
    logger.info("Creating %d cards in Anki", len(selected))
    return [
        create_note(c, anki, tts=tts, deck_name=deck_name, model_name=model_name, voice_id=voice_id)
        for c in selected
    ]
