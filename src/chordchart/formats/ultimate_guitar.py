"""Ultimate Guitar plain-text format: a chord row above each lyric line.

::

    [Verse 1]
      G              C        G
      Amazing grace, how sweet the sound

A chord row is a line made only of chord names.  It is paired with the line
right below it unless that line is a header or blank, or there is none, in
which case the row is kept as an ordinary lyric.  Chord columns are stored
with a fixed +2 bias matching the two-space indent the exporter writes,
clamped to the end of the lyric, so positions are approximate and the
format does not round-trip exactly.  A leading title / ``Artist:`` block
before the first header is read back as song metadata.
"""

import re

from ..models import Section, Song
from .base import TextFormatAdapter
from .utils import (
    SectionCounters,
    is_chord_name,
    is_chord_row,
    is_header,
    pad_chord_row,
    parse_text_sections,
)

INDENT = "  "
ARTIST_PREFIX = "Artist: "


def extract_chords_with_offsets(line: str) -> list[tuple[int, str]]:
    """Return ``(column, chord)`` pairs for every chord token in a chord row."""
    return [(m.start(), m.group()) for m in re.finditer(r"\S+", line) if is_chord_name(m.group())]


def _read_chord_pair(lines: list[str], i: int) -> tuple[str, list[tuple[int, str]], int]:
    line = lines[i]
    lyric = lines[i + 1] if i + 1 < len(lines) else None
    if is_chord_row(line) and lyric is not None and lyric.strip() and not is_header(lyric):
        chords = [
            (min(column + len(INDENT), len(lyric)), name)
            for column, name in extract_chords_with_offsets(line)
        ]
        return lyric, chords, i + 2
    return line, [], i + 1


def split_preamble(text: str) -> tuple[str, str, str]:
    """Split off a leading ``title`` / ``Artist: name`` block.

    Returns ``(title, artist, rest)``.  The block only counts when the next
    non-blank line is a header; otherwise the text comes back untouched with
    an empty title and artist.
    """
    lines = text.splitlines()
    if len(lines) < 3 or is_header(lines[0]) or not lines[0].strip():
        return "", "", text
    if not lines[1].startswith(ARTIST_PREFIX):
        return "", "", text
    rest = lines[2:]
    while rest and not rest[0].strip():
        rest.pop(0)
    if not rest or not is_header(rest[0]):
        return "", "", text
    return lines[0].strip(), lines[1][len(ARTIST_PREFIX):].strip(), "\n".join(rest)


def parse_ultimate_guitar_sections(
    text: str, counters: SectionCounters | None = None
) -> tuple[list[Section], SectionCounters]:
    """Parse Ultimate Guitar text, continuing the numbering in *counters*.

    A title / artist preamble as written by the exporter is skipped.
    """
    _, _, body = split_preamble(text)
    return parse_text_sections(body, _read_chord_pair, counters)


def parse_ultimate_guitar_text(text: str) -> list[Section]:
    sections, _ = parse_ultimate_guitar_sections(text)
    return sections


def export_ultimate_guitar_text(sections: list[Section], title: str = "", artist: str = "") -> str:
    """Render sections with chord rows above two-space-indented lyrics.

    A ``title`` / ``Artist:`` preamble is written only when both are given.
    """
    out: list[str] = []
    if title and artist:
        out.extend([title, ARTIST_PREFIX + artist, ""])

    for index, section in enumerate(sections):
        name = section.type[:1].upper() + section.type[1:]
        out.append(f"[{name} {section.number}]" if section.number else f"[{name}]")
        for line_index, line in enumerate(section.lines):
            chords = section.chords_on_line(line_index)
            if chords:
                out.append(INDENT + pad_chord_row(chords, start=len(INDENT)))
            out.append(INDENT + line if line.strip() else "")
        if index < len(sections) - 1:
            out.append("")

    return "\n".join(out) + "\n"


class UltimateGuitarTextAdapter(TextFormatAdapter):
    """Adapter for chords-over-lyrics text as pasted from Ultimate Guitar."""

    name = "ultimate-guitar"
    extensions = (".ug", ".tab")

    def parse_sections(self, text: str) -> list[Section]:
        return parse_ultimate_guitar_text(text)

    def parse(self, data: str, source: str = "<input>") -> Song:
        title, artist, _ = split_preamble(data)
        return Song(title=title, artist=artist, sections=self.parse_sections(data))

    def render(self, song: Song) -> str:
        return export_ultimate_guitar_text(song.sections, song.title, song.artist)
