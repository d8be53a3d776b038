"""OpenLyrics XML and generic verse-tagged XML.

OpenLyrics layout (subset)::

    <song xmlns="http://openlyrics.info/namespace/2009/song">
      <properties>
        <titles><title>Amazing Grace</title></titles>
        <authors><author>John Newton</author></authors>
        <themes><theme>Grace</theme></themes>
      </properties>
      <lyrics>
        <verse name="v1">
          <lines><chord name="G"/>Amazing grace how <chord name="C"/>sweet<br/>...</lines>
        </verse>
      </lyrics>
    </song>

Documents without the OpenLyrics namespace fall back to any ``verse``,
``chorus``, ``bridge``, ``section`` or ``stanza`` elements.

Chords carry no column of their own.  A chord's position is estimated from
the length of the text before it on the same line after whitespace has been
collapsed, so positions are approximate.
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from xml.sax.saxutils import escape, quoteattr

from bs4 import BeautifulSoup, Comment, NavigableString, ProcessingInstruction, Tag

from ..exceptions import ParseError
from ..models import SECTION_TYPES, Chord, Section, Song
from .base import FormatAdapter
from .utils import SectionCounters, classify_header

logger = logging.getLogger(__name__)

OPENLYRICS_NS = "http://openlyrics.info/namespace/2009/song"

GENERIC_VERSE_TAGS = ["verse", "chorus", "bridge", "section", "stanza"]

# OpenLyrics verse name prefixes
_NAME_CODES = {
    "v": "verse",
    "c": "chorus",
    "b": "bridge",
    "p": "pre-chorus",
    "i": "intro",
    "e": "outro",
    "t": "tag",
}
_TYPE_CODES = {section_type: code for code, section_type in _NAME_CODES.items()}

_VERSE_NAME_RE = re.compile(r"^([a-z-]*)\s*(\d*)")
_AUTHOR_SPLIT_RE = re.compile(r"\s*&\s*|\s+and\s+", re.IGNORECASE)
_THEMES_BLOCK_RE = re.compile(r"<themes[^>]*>([\s\S]*?)</themes>", re.IGNORECASE)
_THEME_RE = re.compile(r"<theme[^>]*>([^<]+)</theme>", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def _unique(values) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        value = value.strip()
        if value:
            seen.setdefault(value, None)
    return list(seen)


def split_authors(names: list[str]) -> list[str]:
    """Split ``"A & B"`` / ``"A and B"`` entries and drop duplicates."""
    return _unique(part for name in names for part in _AUTHOR_SPLIT_RE.split(name))


def extract_themes(soup: BeautifulSoup, raw: str) -> list[str]:
    """Union of ``<theme>`` elements found structurally and by raw regex."""
    structural = [theme.get_text() for theme in soup.find_all("theme")]
    textual = [m for block in _THEMES_BLOCK_RE.findall(raw) for m in _THEME_RE.findall(block)]
    return _unique([*structural, *textual])


def _first_text(soup: BeautifulSoup, *paths: tuple[str, ...]) -> str:
    for path in paths:
        node = soup
        for name in path:
            node = node.find(name) if node else None
        if node:
            return node.get_text(strip=True)
    return ""


# ---------------------------------------------------------------------------
# Verse content
# ---------------------------------------------------------------------------


def _is_br(tag: Tag) -> bool:
    return tag.name.lower() == "br"


class _LineCollector:
    """Accumulate lyric text and chord anchors while walking a verse."""

    def __init__(self, newline_breaks: bool):
        self.newline_breaks = newline_breaks
        self.lines: list[str] = [""]
        self.chords: list[Chord] = []

    def text(self, value: str) -> None:
        if self.newline_breaks:
            first, *rest = value.split("\n")
            self._append(first)
            for part in rest:
                self.newline()
                self._append(part)
        else:
            self._append(value)

    def _append(self, value: str) -> None:
        value = _WHITESPACE_RE.sub(" ", value)
        if not self.lines[-1] or self.lines[-1].endswith(" "):
            value = value.lstrip()
        self.lines[-1] += value

    def newline(self) -> None:
        self.lines.append("")

    def chord(self, name: str) -> None:
        line = len(self.lines) - 1
        self.chords.append(Chord(text=name, position=len(self.lines[line]), line=line))

    def walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, (Comment, ProcessingInstruction)):
                continue
            if isinstance(child, NavigableString):
                self.text(str(child))
            elif _is_br(child):
                self.newline()
            elif child.name.lower() == "chord":
                name = child.get("name") or child.get("root")
                if name:
                    self.chord(name)
                self.walk(child)
            else:
                self.walk(child)

    def finish(self) -> tuple[list[str], list[Chord]]:
        lines = [line.rstrip() for line in self.lines]
        while len(lines) > 1 and not lines[0] and not any(c.line == 0 for c in self.chords):
            lines.pop(0)
            for chord in self.chords:
                chord.line -= 1
        while len(lines) > 1 and not lines[-1] and not any(c.line == len(lines) - 1 for c in self.chords):
            lines.pop()
        for index, chord in enumerate(self.chords):
            chord.position = max(0, min(chord.position, len(lines[chord.line])))
            chord.id = f"chord-{chord.line}-{index}"
        return lines, self.chords


def verse_lines(element: Tag) -> tuple[list[str], list[Chord]]:
    """Return the lyric lines and estimated chords of one verse element.

    ``<br>`` variants separate lines.  Inside ``<lines>`` containers whitespace
    is only formatting; a generic element without any ``<br>`` uses its own
    newlines as line breaks instead.
    """
    containers = element.find_all("lines") or [element]
    newline_breaks = not element.find("lines") and not element.find(_is_br)
    collector = _LineCollector(newline_breaks)
    for index, container in enumerate(containers):
        if index:
            collector.newline()
        collector.walk(container)
    return collector.finish()


def verse_type(name: str | None) -> str:
    """Map an OpenLyrics verse name (``v1``, ``c``, ``pre-chorus2``) to a type."""
    m = _VERSE_NAME_RE.match((name or "").strip().lower())
    prefix = m.group(1) if m else ""
    if prefix in SECTION_TYPES:
        return prefix
    if prefix in _NAME_CODES:
        return _NAME_CODES[prefix]
    return classify_header(prefix)


def _verse_number(name: str | None) -> int | None:
    m = re.search(r"\d+", name or "")
    return int(m.group()) if m else None


def _build_section(element: Tag, section_type: str, name: str | None, counters: SectionCounters):
    number = _verse_number(name)
    if number is None:
        number, counters = counters.advance(section_type)
    lines, chords = verse_lines(element)
    return Section(type=section_type, content="\n".join(lines), number=number, chords=chords), counters


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _check_well_formed(content: str, source: str) -> None:
    try:
        ET.fromstring(content)
    except ET.ParseError as exc:
        raise ParseError(source, f"Failed to parse XML file: {exc}") from exc


def parse_xml_file(content: str, source: str = "<xml>") -> Song:
    """Parse an OpenLyrics or generic verse-tagged XML document.

    Raises :class:`~chordchart.exceptions.ParseError` carrying the XML
    parser's message when the document is not well formed.
    """
    _check_well_formed(content, source)
    soup = BeautifulSoup(content, "xml")

    sections: list[Section] = []
    counters = SectionCounters()

    if OPENLYRICS_NS in content:
        logger.debug("OpenLyrics namespace found in %s", source)
        lyrics = soup.find("lyrics") or soup
        for verse in lyrics.find_all("verse"):
            name = verse.get("name")
            section, counters = _build_section(verse, verse_type(name), name, counters)
            sections.append(section)
    else:
        logger.debug("No OpenLyrics namespace in %s, using generic verse elements", source)
        for element in soup.find_all(GENERIC_VERSE_TAGS):
            if element.find_parent(GENERIC_VERSE_TAGS):
                continue
            name = element.get("name") or element.get("type")
            if element.name in SECTION_TYPES:
                section_type = element.name
            else:
                section_type = verse_type(name)
            section, counters = _build_section(element, section_type, name, counters)
            sections.append(section)

    authors = [a.get_text() for a in soup.select("authors > author")]
    if not authors:
        authors = [a.get_text() for a in soup.find_all(["author", "artist"])]

    song = Song(
        title=_first_text(soup, ("titles", "title"), ("title",)),
        artist=", ".join(split_authors(authors)),
        sections=sections,
        tags=extract_themes(soup, content),
        original_key=_first_text(soup, ("properties", "key")) or None,
    )
    logger.debug("Parsed %d section(s) from %s", len(sections), source)
    return song


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def verse_name(section: Section) -> str:
    prefix = _TYPE_CODES.get(section.type, section.type)
    return f"{prefix}{section.number or ''}"


def _lines_markup(section: Section) -> str:
    parts = []
    for index, line in enumerate(section.lines):
        if index:
            parts.append("<br/>")
        last = 0
        for chord in section.chords_on_line(index):
            pos = max(last, min(chord.position, len(line)))
            parts.append(escape(line[last:pos]))
            parts.append(f"<chord name={quoteattr(chord.text)}/>")
            last = pos
        parts.append(escape(line[last:]))
    return "".join(parts)


def export_openlyrics(song: Song) -> str:
    """Serialize *song* as an OpenLyrics 0.9 document."""
    modified = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    out = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<song xmlns="{OPENLYRICS_NS}" version="0.9" createdIn="chordchart" modifiedDate="{modified}">',
        "  <properties>",
        f"    <titles><title>{escape(song.title or 'Untitled Song')}</title></titles>",
    ]
    authors = [name for name in song.artist.split(", ") if name]
    if authors:
        out.append("    <authors>")
        out.extend(f"      <author>{escape(name)}</author>" for name in authors)
        out.append("    </authors>")
    if song.original_key:
        out.append(f"    <key>{escape(song.original_key)}</key>")
    if song.tags:
        out.append("    <themes>")
        out.extend(f"      <theme>{escape(tag)}</theme>" for tag in song.tags)
        out.append("    </themes>")
    out.append("  </properties>")
    out.append("  <lyrics>")
    for section in song.sections:
        out.append(f"    <verse name={quoteattr(verse_name(section))}>")
        out.append(f"      <lines>{_lines_markup(section)}</lines>")
        out.append("    </verse>")
    out.append("  </lyrics>")
    out.append("</song>")
    return "\n".join(out) + "\n"


class OpenLyricsAdapter(FormatAdapter):
    """Adapter for OpenLyrics / OpenSong-style XML song files."""

    name = "openlyrics"
    extensions = (".xml",)

    def parse(self, data: str, source: str = "<xml>") -> Song:
        return parse_xml_file(data, source)

    def render(self, song: Song) -> str:
        return export_openlyrics(song)
