"""Reporting utilities for parsed card sessions."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .ingest import write_csv
from .outcome import Outcome
from .publish import NO_AUDIO, CardCreationResult
from .segment import CardDraft


def cards_to_rows(
    cards: Iterable[CardDraft],
    duplicates: Optional[Dict[str, Outcome]] = None,
) -> List[dict]:
    """Flatten cards to CSV rows.

    ``front``/``back``/``tags`` follow the candidate CSV layout, so the file
    can be fed straight into a candidate linter.
    """
    duplicates = duplicates or {}
    rows = []
    for c in cards:
        dup = duplicates.get(c.id)
        rows.append(
            {
                "front": c.script,
                "back": c.translation,
                "tags": "",
                "annotation": c.annotation,
                "selected": c.selected,
                "card_id": c.id,
                "duplicate": bool(dup.value) if dup else "",
                "duplicate_status": dup.status if dup else "",
            }
        )
    return rows


def write_cards_csv(
    path: str,
    cards: Iterable[CardDraft],
    duplicates: Optional[Dict[str, Outcome]] = None,
) -> None:
    write_csv(path, cards_to_rows(list(cards), duplicates))


def print_cards(cards: Iterable[CardDraft]) -> None:
    for c in cards:
        mark = "x" if c.selected else " "
        translation = c.translation.replace("\n", " / ")
        print(f"[{mark}] {c.id}  {c.script}  ->  {translation}")
        if c.annotation:
            print(f"      {c.annotation}")


def print_summary(
    cards: Iterable[CardDraft],
    duplicates: Optional[Dict[str, Outcome]] = None,
    results: Optional[Iterable[CardCreationResult]] = None,
) -> None:
    """Print summary of a card session.

    Args:
        cards: Cards in the session
        duplicates: Optional duplicate check outcomes keyed by card id
        results: Optional note creation results
    """
    cards_list = list(cards)
    selected = sum(1 for c in cards_list if c.selected)

    if duplicates is not None:
        confirmed_dup = sum(1 for o in duplicates.values() if o.is_confirmed and o.value)
        confirmed_new = sum(1 for o in duplicates.values() if o.is_confirmed and not o.value)
        unknown = [o for o in duplicates.values() if o.is_unknown]
        print("Duplicate Check Summary:")
        print(f"  Duplicates (deselected): {confirmed_dup}")
        print(f"  New:                     {confirmed_new}")
        print(f"  Unknown (check failed):  {len(unknown)}")
        if unknown:
            print(f"  Error: {unknown[0].error}")
        print()

    if results is not None:
        results_list = list(results)
        created = sum(1 for r in results_list if r.success)
        with_audio = sum(1 for r in results_list if r.success and r.audio.is_confirmed)
        print("Note Creation Summary:")
        print(f"  Created:    {created}")
        print(f"  Failed:     {len(results_list) - created}")
        print(f"  With audio: {with_audio}")
        for r in results_list:
            if not r.success:
                print(f"  {r.card_id}: {r.error or 'not created'}")
            elif r.audio.is_unknown and r.audio != NO_AUDIO:
                print(f"  {r.card_id}: created without audio ({r.audio.error})")
        print()

    print("Session Summary:")
    print(f"  cards   : {len(cards_list)}")
    print(f"  selected: {selected}")
