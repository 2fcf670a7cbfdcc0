"""
Tag derivation from free text.

Words become lower-cased `#word` tokens; emoji are kept as-is after the words.
"""
from __future__ import annotations

import re
from typing import Optional

FALLBACK_TAGS: tuple[str, ...] = ("#bulle", "#réseau", "✨")

_EMOJI_RE = re.compile(
    "["
    "\u2600-\u27BF"
    "\U0001F300-\U0001F5FF"
    "\U0001F600-\U0001F64F"
    "\U0001F680-\U0001F6FF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA70-\U0001FAFF"
    "]"
)


def tokenize_text(text: Optional[str]) -> list[str]:
    cleaned = (text or "").strip()
    if not cleaned:
        return []

    emoji = _EMOJI_RE.findall(cleaned)
    words = [f"#{word.lower()}" for word in _EMOJI_RE.sub("", cleaned).split()]
    return words + emoji


def ensure_tags(note: Optional[str], title: Optional[str] = "") -> tuple[str, ...]:
    """Tags from the note, else from the title, else the fallback set."""
    tokens = tokenize_text(note)
    if tokens:
        return tuple(tokens)
    title_tokens = tokenize_text(title)
    if title_tokens:
        return tuple(title_tokens)
    return FALLBACK_TAGS
