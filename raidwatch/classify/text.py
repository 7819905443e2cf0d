"""Normalization helpers shared by both classifiers."""

from __future__ import annotations

import re
import unicodedata

_ZERO_WIDTH = {
    "\u200b",  # zero width space
    "\u200c",  # zero width non-joiner
    "\u200d",  # zero width joiner
    "\ufeff",  # byte order mark
    "\u2060",  # word joiner
    "\u00ad",  # soft hyphen
}

# "[Name](https://t.me/x)" or "[Name]"
_BRACKET_TOKEN = r"\[[^\[\]\n]*\](?:\([^()\n]*\))?"
_FOOTER_BODY = rf"(?:{_BRACKET_TOKEN}\s*(?:\|\s*{_BRACKET_TOKEN}\s*)+|\[[^\[\]\n]*\|[^\[\]\n]*\](?:\([^()\n]*\))?)"

# Cross-post promo: two or more bracketed tokens joined by "|",
# or one bracketed token with "|" inside it.
_FOOTER_LINE = re.compile(rf"^\s*{_FOOTER_BODY}\s*$")
_FOOTER_TAIL = re.compile(rf"\s+{_FOOTER_BODY}\s*$")


def strip_footer(text: str) -> str:
    """Drop a trailing link footer such as ``[Chan A] | [Chan B]``."""
    lines = (text or "").rstrip().splitlines()
    while lines and (not lines[-1].strip() or _FOOTER_LINE.match(lines[-1])):
        lines.pop()
    if lines:
        lines[-1] = _FOOTER_TAIL.sub("", lines[-1])
    return "\n".join(lines).rstrip()


def normalize(text: str) -> str:
    """Footer-free, NFKC-folded, lowercased, single-spaced text."""
    stripped = strip_footer(text)
    folded = unicodedata.normalize("NFKC", stripped)
    folded = "".join(ch for ch in folded if ch not in _ZERO_WIDTH)
    # Telegram posts mix the ASCII apostrophe with typographic ones
    folded = folded.replace("\u2019", "'").replace("\u02bc", "'")
    return re.sub(r"\s+", " ", folded).strip().lower()
