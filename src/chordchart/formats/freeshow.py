"""FreeShow plain-text format: chords inline in the lyric line.

::

    [Verse]
    Though [B]the natio[G#m]ns rage, kingdoms [F#]rise and fall

    [Chorus]
    ...

Chord positions are exact, so export followed by import gives back the same
content and chord offsets.
"""

from ..models import Section, Song
from .base import TextFormatAdapter
from .utils import SectionCounters, insert_inline_markers, parse_text_sections, strip_inline_markers


def _read_inline_line(lines: list[str], i: int) -> tuple[str, list[tuple[int, str]], int]:
    clean, chords = strip_inline_markers(lines[i].strip())
    return clean, chords, i + 1


def parse_freeshow_sections(
    text: str, counters: SectionCounters | None = None
) -> tuple[list[Section], SectionCounters]:
    """Parse FreeShow text, continuing the numbering in *counters*."""
    return parse_text_sections(text, _read_inline_line, counters)


def parse_freeshow_text(text: str) -> list[Section]:
    sections, _ = parse_freeshow_sections(text)
    return sections


def header_label(section_type: str) -> str:
    """``pre-chorus`` -> ``Pre-Chorus``."""
    return "-".join(word.capitalize() for word in section_type.split("-"))


def export_freeshow_text(sections: list[Section]) -> str:
    """Render sections as ``[Type]`` blocks with inline ``[Chord]`` markers."""
    blocks = []
    for section in sections:
        lines = [
            insert_inline_markers(line, section.chords_on_line(index))
            for index, line in enumerate(section.lines)
        ]
        blocks.append("\n".join([f"[{header_label(section.type)}]", *lines]))
    return "\n\n".join(blocks)


class FreeShowTextAdapter(TextFormatAdapter):
    """Adapter for FreeShow's inline-bracket text format."""

    name = "freeshow"
    extensions = (".txt",)

    def parse_sections(self, text: str) -> list[Section]:
        return parse_freeshow_text(text)

    def render(self, song: Song) -> str:
        return export_freeshow_text(song.sections) + "\n"
