"""Anki-Glossa package.

Turns pasted Greek / English / Russian study text into Anki card drafts.
The segmenter is pure; everything that talks to Anki, ElevenLabs or Gemini
lives in its own module.
"""

__all__ = [
    "normalize",
    "segment",
    "outcome",
    "session_store",
    "deck_index",
    "anki_connect",
    "detect_duplicates",
    "tts",
    "explain",
    "publish",
    "ingest",
    "report",
]
