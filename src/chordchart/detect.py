"""Guess which import format a piece of chart text is written in."""

import logging
import os

from .formats.utils import INLINE_CHORD_RE, LEADING_CHORD_RE, is_header

logger = logging.getLogger(__name__)

ULTIMATE_GUITAR = "ultimate-guitar"
FREESHOW = "freeshow"
OPENLP = "openlp"  # legacy tag, never returned by detect_format
OPENLYRICS = "openlyrics"
SHOW = "show"


def _has_inline_chord(line: str) -> bool:
    for m in INLINE_CHORD_RE.finditer(line):
        if m.group(0) != line:
            return True
    return False


def detect_format(text: str) -> str:
    """Classify pasted chart text as ``ultimate-guitar`` or ``freeshow``.

    Decision order matters and is kept exactly:

    1. headers and inline ``[Chord]`` markers  -> freeshow
    2. headers and a line starting like a chord row -> ultimate-guitar
    3. headers only -> freeshow
    4. anything else -> ultimate-guitar
    """
    has_section = has_chord_line = has_inline_chord = False

    for raw in text.splitlines():
        line = raw.strip()
        if is_header(line):
            has_section = True
        if LEADING_CHORD_RE.match(line):
            has_chord_line = True
        if _has_inline_chord(line):
            has_inline_chord = True

    if has_section and has_inline_chord:
        result = FREESHOW
    elif has_section and has_chord_line:
        result = ULTIMATE_GUITAR
    elif has_section:
        result = FREESHOW
    else:
        result = ULTIMATE_GUITAR
    logger.debug(
        "detect_format: section=%s chord_line=%s inline=%s -> %s",
        has_section,
        has_chord_line,
        has_inline_chord,
        result,
    )
    return result


def sniff_format(text: str, filename: str | None = None) -> str:
    """Return the format of *text*, letting structured files identify themselves.

    ``.show`` files and JSON arrays are FreeShow shows, ``.xml`` files and
    documents opening with ``<?xml`` or ``<song`` are OpenLyrics; everything
    else goes through :func:`detect_format`.
    """
    ext = os.path.splitext(filename or "")[1].lower()
    if ext == ".show":
        return SHOW
    if ext == ".xml":
        return OPENLYRICS

    head = text.lstrip("\ufeff \t\r\n")
    if head.startswith("["):
        first_line = head.splitlines()[0].strip()
        if first_line.startswith(("[\"", "[{", "[[")) or first_line == "[":
            return SHOW
    if head.startswith(("<?xml", "<song")):
        return OPENLYRICS
    return detect_format(text)
