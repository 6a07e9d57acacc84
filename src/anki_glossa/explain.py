"""Short Russian explanations for cards, generated with Gemini."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

import httpx

from .outcome import Outcome
from .segment import CardDraft

logger = logging.getLogger(__name__)

API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.0-flash"
GENERATION_CONFIG = {"temperature": 0.7, "maxOutputTokens": 200}

PROMPT_TEMPLATE = """Ты - преподаватель греческого языка. Дай краткое объяснение на русском языке (максимум 2-3 предложения) для следующего греческого слова или фразы.

Греческое слово/фраза: {script}
Английский перевод: {gloss}

Дай краткое, полезное объяснение на русском языке, которое поможет запомнить это слово. Включи информацию о контексте использования, если уместно."""


class ExplanationError(RuntimeError):
    pass


def build_prompt(script: str, gloss: str) -> str:
    return PROMPT_TEMPLATE.format(script=script, gloss=gloss)


def _first_text(body: dict) -> str:
    for candidate in body.get("candidates") or []:
        for part in (candidate.get("content") or {}).get("parts") or []:
            text = part.get("text")
            if text:
                return text.strip()
        break
    return ""


class GeminiExplainer:
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self._http = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def explain(self, script: str, gloss: str) -> str:
        """Return a short Russian explanation, or "" if Gemini gave no text.

        Raises:
            ExplanationError: Missing API key, transport failure or API error
        """
        if not self.api_key:
            raise ExplanationError("Gemini API key is required")
        url = f"{API_URL}/{self.model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": build_prompt(script, gloss)}]}],
            "generationConfig": GENERATION_CONFIG,
        }
        logger.info("Calling Gemini API for: %s", script)
        try:
            response = self._http.post(url, params={"key": self.api_key}, json=body)
        except httpx.HTTPError as e:
            raise ExplanationError(f"Error generating explanation: {e}") from e
        if not response.is_success:
            raise ExplanationError(f"Gemini API error: {response.text}")
        try:
            return _first_text(response.json())
        except ValueError as e:
            raise ExplanationError(f"Invalid Gemini response: {e}") from e


def explain_cards(
    cards: Iterable[CardDraft],
    explainer: GeminiExplainer,
    overwrite: bool = False,
) -> Dict[str, Outcome]:
    """Fill ``annotation`` for each card with a generated explanation.

    Cards that already carry an annotation are skipped unless ``overwrite``.
    The gloss sent along is the first line of the card's translation.
    """
    results: Dict[str, Outcome] = {}
    for card in cards:
        if card.annotation and not overwrite:
            continue
        gloss = card.translation.split("\n", 1)[0]
        try:
            text = explainer.explain(card.script, gloss)
        except ExplanationError as e:
            logger.error("Explanation failed for %s: %s", card.script, e)
            results[card.id] = Outcome.unknown(card.annotation, str(e))
            continue
        card.annotation = text
        results[card.id] = Outcome.confirmed(text)
    return results
