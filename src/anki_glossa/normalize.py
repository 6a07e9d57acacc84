"""Unicode helpers and the line normalizer for pasted study text.

Script detection is a plain code-point interval check; adding support for
another script means adding a row to ``SCRIPT_RANGES``.
"""

from __future__ import annotations

import unicodedata as ud
from typing import List, Tuple

GREEK_AND_COPTIC: Tuple[int, int] = (0x0370, 0x03FF)
GREEK_EXTENDED: Tuple[int, int] = (0x1F00, 0x1FFF)

SCRIPT_RANGES: Tuple[Tuple[int, int], ...] = (GREEK_AND_COPTIC, GREEK_EXTENDED)

# Punctuation absorbed into the script span when it follows the last script letter.
BOUNDARY_PUNCTUATION = ".;!?"
BOUNDARY_SPACE = " "


def is_script_char(ch: str) -> bool:
    """Return True if ``ch`` falls inside one of the source-script ranges."""
    cp = ord(ch)
    return any(lo <= cp <= hi for lo, hi in SCRIPT_RANGES)


def normalize_lines(text: str | None) -> List[str]:
    """Split on line breaks, strip each line and drop the blank ones."""
    if not text:
        return []
    lines = (line.strip() for line in str(text).split("\n"))
    return [line for line in lines if line]


def normalize_text_nfc(text: str | None) -> str:
    """Apply Unicode NFC to input text (safe for None-like inputs)."""
    if text is None:
        return ""
    return ud.normalize("NFC", str(text))
