import copy
import uuid
from dataclasses import dataclass, field

SECTION_TYPES = (
    "verse",
    "chorus",
    "bridge",
    "tag",
    "break",
    "intro",
    "outro",
    "pre-chorus",
)


@dataclass
class Chord:
    """A chord anchored to a character offset on one lyric line.

    ``position`` counts characters in the marker-free lyric line ``line`` of
    the owning section, so ``0 <= position <= len(section.lines[line])``.
    """

    text: str
    position: int
    line: int
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = f"chord-{self.line}-{self.position}"


@dataclass
class Section:
    """A labelled block of a song with its chords kept out of the lyric text."""

    type: str = "verse"
    content: str = ""  # newline-joined lyric lines, no chord markup
    number: int | None = None
    chords: list[Chord] = field(default_factory=list)

    def __post_init__(self):
        if self.type not in SECTION_TYPES:
            raise ValueError(f"Unknown section type: {self.type!r}")

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")

    @property
    def label(self) -> str:
        """Display label, e.g. ``"Verse 1"`` or ``"Pre-Chorus"``."""
        name = "-".join(word.capitalize() for word in self.type.split("-"))
        return f"{name} {self.number}" if self.number else name

    def chords_on_line(self, index: int) -> list[Chord]:
        """Return the chords of line *index* sorted left to right."""
        return sorted((c for c in self.chords if c.line == index), key=lambda c: c.position)

    def move_chord(self, chord_id: str, position: int, line: int) -> Chord:
        """Reposition a chord (drag and drop), clamping into the valid range.

        Only ``position`` and ``line`` change.  Raises KeyError for an
        unknown id.
        """
        for chord in self.chords:
            if chord.id == chord_id:
                break
        else:
            raise KeyError(chord_id)
        lines = self.lines
        chord.line = max(0, min(line, len(lines) - 1))
        chord.position = max(0, min(position, len(lines[chord.line])))
        return chord


@dataclass
class Song:
    """Canonical, format-agnostic representation of a chord chart."""

    title: str = ""
    artist: str = ""
    sections: list[Section] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    notes: str = ""
    original_key: str | None = None
    original_sections: list[Section] | None = None  # snapshot for transpose reset
    current_transpose: str = ""  # e.g. "+2", "-3", "G"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def chord_texts(self) -> list[str]:
        """All chord names in section order."""
        return [chord.text for section in self.sections for chord in section.chords]

    def snapshot_original(self) -> None:
        """Capture ``original_sections`` once; later calls keep the first copy."""
        if self.original_sections is None:
            self.original_sections = copy.deepcopy(self.sections)

    def replace_section_text(self, index: int, text: str, fmt: str = "freeshow") -> Section:
        """Re-parse *text* and replace section *index* wholesale.

        The section type and number are kept; content and chords are replaced
        atomically by the result of parsing *text* with the *fmt* text importer.
        """
        from .registry import get_adapter

        old = self.sections[index]
        parsed = get_adapter(fmt).parse_sections(text)
        content_lines: list[str] = []
        chords: list[Chord] = []
        for section in parsed:
            offset = len(content_lines)
            content_lines.extend(section.lines)
            for chord in section.chords:
                chords.append(Chord(chord.text, chord.position, chord.line + offset))
        new = Section(type=old.type, content="\n".join(content_lines), number=old.number, chords=chords)
        self.sections[index] = new
        return new
