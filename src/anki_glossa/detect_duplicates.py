"""Duplicate detection for card drafts against an existing deck.

The lookup is any callable mapping expressions to the subset already in
the deck: ``ExpressionIndex.lookup`` for an exported deck, or
``AnkiConnectClient.find_existing_expressions`` for a running Anki.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Set

import httpx

from .anki_connect import AnkiConnectError
from .outcome import Outcome
from .segment import CardDraft

logger = logging.getLogger(__name__)

ExpressionLookup = Callable[[List[str]], Set[str]]


def check_duplicates(
    cards: Iterable[CardDraft],
    lookup: ExpressionLookup,
) -> Dict[str, Outcome]:
    """Mark each card as duplicate / not duplicate.

    Confirmed duplicates are deselected. If the lookup fails, every card gets
    an unknown outcome defaulting to "not duplicate" and selections are left
    alone.

    Returns:
        Mapping of card id to ``Outcome`` with a boolean value
    """
    cards = list(cards)
    if not cards:
        return {}

    try:
        existing = lookup([c.script for c in cards])
    except (httpx.HTTPError, AnkiConnectError, OSError, ValueError) as e:
        logger.exception("Error checking duplicates")
        message = str(e) or type(e).__name__
        return {c.id: Outcome.unknown(False, message) for c in cards}

    results: Dict[str, Outcome] = {}
    for card in cards:
        is_duplicate = card.script in existing
        results[card.id] = Outcome.confirmed(is_duplicate)
        if is_duplicate:
            card.selected = False
            logger.info("Found duplicate, deselecting: %s", card.script)
    return results


def anki_lookup(client, deck_name: str | None = None) -> ExpressionLookup:
    """Adapt an ``AnkiConnectClient`` to the lookup signature."""
    def _lookup(expressions: List[str]) -> Set[str]:
        return client.find_existing_expressions(expressions, deck_name=deck_name)
    return _lookup
