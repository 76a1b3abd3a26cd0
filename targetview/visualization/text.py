"""
Fixed-width text wrapping.

Glyph width is approximated as 0.6 * font size per character. Existing
exports were produced with this heuristic, so it is kept instead of
real font metrics.
"""

from __future__ import annotations
from typing import List, Optional

CHAR_WIDTH_FACTOR = 0.6


def estimate_width(text: str, font_size: float) -> float:
    return len(text) * font_size * CHAR_WIDTH_FACTOR


def wrap_text(text: Optional[str], max_width: float, font_size: float = 10) -> List[str]:
    """
    Greedy word wrap.

    A word that alone exceeds the width stays on its own line; it is
    never split.
    """
    if not text:
        return []

    lines: List[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if estimate_width(candidate, font_size) > max_width and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines if lines else [text]
