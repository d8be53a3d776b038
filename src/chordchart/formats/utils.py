"""Shared grammar and parsing helpers used by every format adapter.

  1. CHORD_RE / LEADING_CHORD_RE / INLINE_CHORD_RE — the one chord grammar
  2. is_header() / classify_header()             — ``[Verse 2]`` style lines
  3. SectionCounters                             — per-type running numbers
  4. strip_inline_markers()                      — ``A[G]mazing`` → ``Amazing`` + offsets
  5. insert_inline_markers() / pad_chord_row()   — the inverse for exporters
  6. parse_text_sections()                       — header state machine over raw text

Positions are always offsets into the marker-free lyric line.
"""

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from ..models import Chord, Section

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

# Chord name without brackets: G, Am7, Cmaj7, Asus4, Dm7b5, C#m/G#, Bb/D
_CHORD_PAT = (
    r"[A-G][#b]?"
    r"(?:maj|min|m|aug|dim|sus|add|M)?"
    r"\d*"
    r"(?:(?:sus|add|b|#)\d+)*"
    r"(?:\/[A-G][#b]?)?"
)
CHORD_RE = re.compile(_CHORD_PAT)
CHORD_NAME_RE = re.compile(rf"^{_CHORD_PAT}$")

# Permissive "starts like a chord row" test used by the format detector.
LEADING_CHORD_RE = re.compile(r"^[A-Ga-g][#mb\d+\s\/]*")

# A bracketed chord inside a lyric line: Though [B]the natio[G#m]ns rage
INLINE_CHORD_RE = re.compile(rf"\[({_CHORD_PAT})\]")

# Any [token] run, chord or not; non-greedy so adjacent markers stay apart.
ANY_BRACKET_RE = re.compile(r"\[(.*?)\]")

HEADER_RE = re.compile(r"^\[([^\[\]]+)\]$")

_DIGITS_RE = re.compile(r"\d+")


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


def is_chord_name(token: str) -> bool:
    return bool(CHORD_NAME_RE.match(token))


def is_header(line: str) -> bool:
    """Return True for a ``[Label]`` line whose label is not itself a chord."""
    m = HEADER_RE.match(line.strip())
    return bool(m) and not is_chord_name(m.group(1).strip())


def classify_header(label: str) -> str:
    """Map a header label to a section type: chorus > bridge > tag > verse."""
    label = label.lower()
    for section_type in ("chorus", "bridge", "tag"):
        if section_type in label:
            return section_type
    return "verse"


def header_number(label: str) -> int | None:
    m = _DIGITS_RE.search(label)
    return int(m.group()) if m else None


def is_chord_row(line: str) -> bool:
    """Return True when every whitespace-separated token is a chord name."""
    tokens = line.split()
    return bool(tokens) and all(is_chord_name(t) for t in tokens)


# ---------------------------------------------------------------------------
# Section counters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SectionCounters:
    """Running per-type section numbers.

    Immutable: :meth:`advance` hands back a new value, which parse calls
    thread through and return so numbering can continue across calls.
    """

    counts: Mapping[str, int] = field(default_factory=dict)

    def get(self, section_type: str) -> int:
        return self.counts.get(section_type, 0)

    def advance(self, section_type: str) -> tuple[int, "SectionCounters"]:
        number = self.get(section_type) + 1
        return number, SectionCounters({**self.counts, section_type: number})


# ---------------------------------------------------------------------------
# Inline markers
# ---------------------------------------------------------------------------


def strip_inline_markers(line: str) -> tuple[str, list[tuple[int, str]]]:
    """Remove ``[Chord]`` markers from *line*.

    Returns the clean line and ``(position, chord)`` pairs where *position*
    indexes the clean line.  Each marker's position is its index in *line*
    minus the length of all markers removed before it::

        >>> strip_inline_markers("Though [B]the natio[G#m]ns rage")
        ('Though the nations rage', [(7, 'B'), (16, 'G#m')])
    """
    chords: list[tuple[int, str]] = []
    removed = 0
    for m in ANY_BRACKET_RE.finditer(line):
        chords.append((m.start() - removed, m.group(1)))
        removed += len(m.group(0))
    return ANY_BRACKET_RE.sub("", line), chords


def insert_inline_markers(line: str, chords: Iterable[Chord]) -> str:
    """Insert ``[Chord]`` markers into *line* at each chord's position.

    Chords past the end of the line are appended rather than dropped.
    """
    result: list[str] = []
    last = 0
    for chord in sorted(chords, key=lambda c: c.position):
        pos = max(last, min(chord.position, len(line)))
        result.append(line[last:pos])
        result.append(f"[{chord.text}]")
        last = pos
    result.append(line[last:])
    return "".join(result)


def pad_chord_row(chords: Iterable[Chord], start: int = 0) -> str:
    """Lay chords out on one row, each at its recorded column.

    The row is assumed to already be *start* characters wide; padding before
    a chord is its position minus the end column of the previous chord,
    never negative.
    """
    row: list[str] = []
    last = start
    for chord in sorted(chords, key=lambda c: c.position):
        row.append(" " * max(0, chord.position - last) + chord.text)
        last = chord.position + len(chord.text)
    return "".join(row)


# ---------------------------------------------------------------------------
# Header state machine
# ---------------------------------------------------------------------------

# A line reader gets all lines and the cursor, and returns the clean lyric,
# its (position, chord) pairs and the index of the next unread line.
LineReader = Callable[[list[str], int], tuple[str, list[tuple[int, str]], int]]


class _SectionBuilder:
    def __init__(self, section_type: str, number: int | None):
        self.type = section_type
        self.number = number
        self.lines: list[str] = []
        self.chords: list[Chord] = []

    def add(self, text: str, chords: list[tuple[int, str]]) -> None:
        line = len(self.lines)
        for index, (position, name) in enumerate(chords):
            self.chords.append(Chord(text=name, position=position, line=line, id=f"chord-{line}-{index}"))
        self.lines.append(text)

    def build(self) -> Section:
        lines = list(self.lines)
        # blank separators before the next header belong to no section
        while lines and not lines[-1].strip() and not any(c.line == len(lines) - 1 for c in self.chords):
            lines.pop()
        return Section(type=self.type, content="\n".join(lines), number=self.number, chords=self.chords)


def parse_text_sections(
    text: str,
    read_line: LineReader,
    counters: SectionCounters | None = None,
) -> tuple[list[Section], SectionCounters]:
    """Split raw chart text into sections.

    A ``[Header]`` line closes the open section and starts a new one whose
    type comes from :func:`classify_header`; the number is a digit in the
    header or the next per-type count.  Text before the first header opens
    an implicit verse.  Blank lines inside a section are kept as empty
    content lines; every other line goes through *read_line*.

    Returns the sections and the advanced counters.
    """
    counters = counters or SectionCounters()
    sections: list[Section] = []
    current: _SectionBuilder | None = None

    lines = text.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i]

        if not line.strip():
            if current is not None:
                current.add("", [])
            i += 1
            continue

        if is_header(line):
            if current is not None:
                sections.append(current.build())
            label = line.strip()[1:-1]
            section_type = classify_header(label)
            number = header_number(label)
            if number is None:
                number, counters = counters.advance(section_type)
            current = _SectionBuilder(section_type, number)
            i += 1
            continue

        if current is None:
            number, counters = counters.advance("verse")
            current = _SectionBuilder("verse", number)

        clean, chords, i = read_line(lines, i)
        current.add(clean, chords)

    if current is not None:
        sections.append(current.build())

    logger.debug("Parsed %d section(s)", len(sections))
    return sections, counters
