"""FreeShow ``.show`` project files.

A show file is a two-element JSON array ``[song_id, song]``::

    song
        .name                           → Song.title
        .meta.artist / .meta.key        → Song.artist / Song.original_key
        .settings.activeLayout          → id into .layouts
        .layouts[id].slides[].id        → slide order (authoritative)
        .slides[id]
            .group                      → section type (substring match)
            .items[type=text].lines[]
                .text[].value           → lyric line
                .chords[] {pos, key}    → Chord.position / Chord.text

``.slides`` is keyed by opaque id and its key order means nothing; only the
active layout says in which order slides are shown.  Chord offsets are stored
verbatim, which makes this the one lossless import path.
"""

import json
import logging
import random
import string
import time
import uuid

from ..exceptions import ParseError
from ..models import Chord, Section, Song
from .base import FormatAdapter
from .freeshow import header_label
from .utils import SectionCounters

logger = logging.getLogger(__name__)

SECTION_COLORS = {
    "verse": "#5825f5",
    "chorus": "#25a0f5",
    "bridge": "#25f5e6",
    "tag": "#f5a425",
    "break": "#f52525",
    "intro": "#7b25f5",
    "outro": "#b725f5",
    "pre-chorus": "#25f55b",
}

_TEXT_ITEM_STYLE = "top:120.00px;left:163.00px;height:840px;width:1593.59px;"
_LINE_STYLE = "font-size:40px;font-weight:bold;"


def _new_id(length: int = 10) -> str:
    return uuid.uuid4().hex[:length]


def _chord_id() -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=5))


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def _group_type(group: str | None) -> str:
    group = (group or "").lower()
    for section_type in ("chorus", "bridge", "tag"):
        if section_type in group:
            return section_type
    return "verse"


def _slide_order(song_data: dict) -> list[str]:
    slides = song_data["slides"]
    layouts = song_data.get("layouts") or {}
    active = (song_data.get("settings") or {}).get("activeLayout")
    if active and active in layouts:
        logger.debug("Ordering slides by layout %s", active)
        return [ref["id"] for ref in layouts[active].get("slides") or [] if "id" in ref]
    logger.debug("No active layout, using slide map order")
    return list(slides)


def _slide_section(slide: dict, counters: SectionCounters) -> tuple[Section, SectionCounters]:
    section_type = _group_type(slide.get("group"))
    number, counters = counters.advance(section_type)

    lines: list[str] = []
    chords: list[Chord] = []
    for item in slide.get("items") or []:
        if item.get("type") != "text":
            continue
        for line in item.get("lines") or []:
            index = len(lines)
            lines.append("".join(part.get("value", "") for part in line.get("text") or []))
            for chord in line.get("chords") or []:
                chords.append(
                    Chord(
                        text=chord.get("key", ""),
                        position=int(chord.get("pos", 0)),
                        line=index,
                        id=f"chord-{index}-{chord.get('pos', 0)}",
                    )
                )

    section = Section(type=section_type, content="\n".join(lines), number=number, chords=chords)
    return section, counters


def parse_show_file(content: str, source: str = "<show>") -> Song:
    """Parse a FreeShow ``.show`` document.

    Raises :class:`~chordchart.exceptions.ParseError` for invalid JSON, a
    document that is not a ``[id, song]`` array, a song without slides, or
    slides of the wrong shape.  Nothing is returned unless the whole file
    parses.
    """
    try:
        show_data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError(source, f"Invalid FreeShow .show file: {exc}") from exc

    if not isinstance(show_data, list) or len(show_data) < 2:
        raise ParseError(source, "Invalid FreeShow .show file format: expected [id, song] array")
    song_data = show_data[1]
    if not isinstance(song_data, dict) or not isinstance(song_data.get("slides"), dict):
        raise ParseError(source, "Invalid FreeShow .show file format: no slides found")

    slides = song_data["slides"]
    sections: list[Section] = []
    counters = SectionCounters()
    try:
        for slide_id in _slide_order(song_data):
            slide = slides.get(slide_id)
            if not slide:
                logger.debug("Layout references missing slide %s", slide_id)
                continue
            section, counters = _slide_section(slide, counters)
            sections.append(section)

        meta = song_data.get("meta") or {}
        return Song(
            title=song_data.get("name") or "",
            artist=meta.get("artist") or "",
            sections=sections,
            original_key=meta.get("key") or None,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ParseError(source, f"Invalid FreeShow .show file format: {exc}") from exc


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _section_slide(section: Section) -> dict:
    text_item = {
        "type": "text",
        "lines": [],
        "style": _TEXT_ITEM_STYLE,
        "align": "",
        "auto": False,
    }
    for index, line in enumerate(section.lines):
        text_item["lines"].append(
            {
                "align": "",
                "text": [{"value": line, "style": _LINE_STYLE}],
                "chords": [
                    {"id": _chord_id(), "pos": chord.position, "key": chord.text}
                    for chord in section.chords_on_line(index)
                ],
            }
        )

    return {
        "group": header_label(section.type),
        "color": SECTION_COLORS.get(section.type, SECTION_COLORS["verse"]),
        "settings": {},
        "notes": "",
        "items": [text_item],
        "globalGroup": section.type,
    }


def export_show_file(song: Song) -> str:
    """Serialize *song* as a FreeShow ``.show`` document with one layout."""
    slides = {}
    layout_slides = []
    for section in song.sections:
        slide_id = _new_id()
        slides[slide_id] = _section_slide(section)
        layout_slides.append({"id": slide_id})

    layout_id = _new_id()
    now = int(time.time() * 1000)
    title = song.title or "Untitled Song"
    show_data = [
        _new_id(),
        {
            "name": title,
            "private": False,
            "category": "song",
            "settings": {"activeLayout": layout_id, "template": "default"},
            "timestamps": {"created": now, "modified": now, "used": now},
            "quickAccess": {},
            "meta": {
                "title": title,
                "artist": song.artist or "",
                "key": song.original_key or "",
                "duration": "",
            },
            "slides": slides,
            "layouts": {layout_id: {"name": "Default", "notes": "", "slides": layout_slides}},
            "media": {},
        },
    ]
    return json.dumps(show_data)


class ShowFileAdapter(FormatAdapter):
    """Adapter for FreeShow ``.show`` JSON project files."""

    name = "show"
    extensions = (".show",)

    def parse(self, data: str, source: str = "<show>") -> Song:
        return parse_show_file(data, source)

    def render(self, song: Song) -> str:
        return export_show_file(song)
