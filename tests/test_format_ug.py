from pathlib import Path

from chordchart.formats.ultimate_guitar import (
    UltimateGuitarTextAdapter,
    export_ultimate_guitar_text,
    extract_chords_with_offsets,
    parse_ultimate_guitar_sections,
    parse_ultimate_guitar_text,
    split_preamble,
)
from chordchart.models import Chord, Section, Song

FIXTURE = Path(__file__).parent / "fixtures" / "amazing-grace.ug"


def load_fixture() -> str:
    return FIXTURE.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# extract_chords_with_offsets
# ---------------------------------------------------------------------------


def test_extract_chords_with_offsets():
    assert extract_chords_with_offsets("G    C/B  Am7") == [(0, "G"), (5, "C/B"), (10, "Am7")]


def test_extract_skips_non_chord_tokens():
    assert extract_chords_with_offsets("G  x  D") == [(0, "G"), (6, "D")]


# ---------------------------------------------------------------------------
# Import: fixture
# ---------------------------------------------------------------------------


def test_fixture_sections():
    sections = parse_ultimate_guitar_text(load_fixture())
    assert [(s.type, s.number) for s in sections] == [("verse", 1), ("chorus", 1)]


def test_fixture_lyrics_keep_their_indent():
    verse = parse_ultimate_guitar_text(load_fixture())[0]
    assert verse.lines == ["  Amazing grace, how sweet the sound", "  That saved a wretch like me"]


def test_fixture_chord_positions_carry_indent_bias():
    text = load_fixture()
    row = text.splitlines()[1]
    verse = parse_ultimate_guitar_text(text)[0]
    first_line = verse.chords_on_line(0)
    assert [c.text for c in first_line] == ["G", "C", "G"]
    assert first_line[0].position == row.index("G") + 2
    assert first_line[1].position == row.index("C") + 2
    assert [c.text for c in verse.chords_on_line(1)] == ["G", "D"]


def test_fixture_unpaired_lyric_has_no_chords():
    chorus = parse_ultimate_guitar_text(load_fixture())[1]
    assert chorus.lines == ["  I once was lost", "  but now am found"]
    assert {c.line for c in chorus.chords} == {0}


def test_separator_blank_line_dropped():
    verse = parse_ultimate_guitar_text(load_fixture())[0]
    assert not verse.content.endswith("\n")


# ---------------------------------------------------------------------------
# Import: chord row pairing
# ---------------------------------------------------------------------------


def test_chord_row_pairs_with_next_line():
    sections = parse_ultimate_guitar_text("[Verse]\nG       C\nAmazing grace\n")
    verse = sections[0]
    assert verse.content == "Amazing grace"
    assert [(c.text, c.position, c.line) for c in verse.chords] == [("G", 2, 0), ("C", 10, 0)]


def test_chord_row_at_end_is_plain_lyric():
    verse = parse_ultimate_guitar_text("[Verse]\nG C\n")[0]
    assert verse.content == "G C"
    assert verse.chords == []


def test_chord_row_before_header_is_plain_lyric():
    sections = parse_ultimate_guitar_text("[Verse]\nG C\n[Chorus]\nla la\n")
    assert sections[0].content == "G C"
    assert sections[0].chords == []
    assert sections[1].content == "la la"


def test_chord_row_before_blank_is_plain_lyric():
    verse = parse_ultimate_guitar_text("[Verse]\nG C\n\nla la\n")[0]
    assert verse.content == "G C\n\nla la"
    assert verse.chords == []


def test_lines_with_words_are_lyrics():
    verse = parse_ultimate_guitar_text("[Verse]\nA man walks\nC\nin\n")[0]
    assert verse.lines == ["A man walks", "in"]
    assert [(c.text, c.line) for c in verse.chords] == [("C", 1)]


def test_chord_row_wider_than_lyric_is_clamped():
    verse = parse_ultimate_guitar_text("[Verse]\nG      D\nHi\n")[0]
    assert [(c.text, c.position) for c in verse.chords] == [("G", 2), ("D", 2)]
    for chord in verse.chords:
        assert 0 <= chord.position <= len(verse.lines[chord.line])


def test_implicit_verse_before_first_header():
    sections = parse_ultimate_guitar_text("Capo 2\nPlay softly\n\n[Verse 1]\nx\n")
    assert (sections[0].type, sections[0].number) == ("verse", 1)
    assert sections[0].content == "Capo 2\nPlay softly"


def test_split_preamble():
    title, artist, rest = split_preamble("Amazing Grace\nArtist: John Newton\n\n[Verse 1]\n  x\n")
    assert (title, artist) == ("Amazing Grace", "John Newton")
    assert rest == "[Verse 1]\n  x"


def test_split_preamble_needs_header_after_it():
    text = "Amazing Grace\nArtist: John Newton\nno header here\n"
    assert split_preamble(text) == ("", "", text)


def test_preamble_is_not_a_section():
    sections = parse_ultimate_guitar_text("Amazing Grace\nArtist: John Newton\n\n[Verse 1]\nx\n")
    assert [(s.type, s.number, s.content) for s in sections] == [("verse", 1, "x")]


def test_counters_continue_across_calls():
    _, counters = parse_ultimate_guitar_sections("[Chorus]\na\n")
    sections, _ = parse_ultimate_guitar_sections("[Chorus]\nb\n", counters)
    assert sections[0].number == 2


def test_empty_input():
    assert parse_ultimate_guitar_text("") == []


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _verse() -> Section:
    return Section(type="verse", number=1, content="Amazing grace", chords=[Chord("G", 0, 0), Chord("C", 8, 0)])


def test_export_chord_row_and_indent():
    assert export_ultimate_guitar_text([_verse()]) == "[Verse 1]\n  G       C\n  Amazing grace\n"


def test_export_preamble_needs_title_and_artist():
    assert export_ultimate_guitar_text([_verse()], "Amazing Grace", "John Newton").startswith(
        "Amazing Grace\nArtist: John Newton\n\n[Verse 1]\n"
    )
    assert export_ultimate_guitar_text([_verse()], "Amazing Grace").startswith("[Verse 1]\n")


def test_export_blank_lines_stay_blank():
    section = Section(content="one\n\nthree")
    assert export_ultimate_guitar_text([section]) == "[Verse]\n  one\n\n  three\n"


def test_export_header_capitalizes_first_letter_only():
    text = export_ultimate_guitar_text([Section(type="pre-chorus", number=2, content="x")])
    assert text.startswith("[Pre-chorus 2]\n")


def test_export_separates_sections():
    text = export_ultimate_guitar_text([Section(content="a"), Section(type="chorus", content="b")])
    assert text == "[Verse]\n  a\n\n[Chorus]\n  b\n"


def test_export_then_import_keeps_structure():
    text = export_ultimate_guitar_text([_verse(), Section(type="chorus", number=1, content="was blind")])
    sections = parse_ultimate_guitar_text(text)
    assert [(s.type, s.number) for s in sections] == [("verse", 1), ("chorus", 1)]
    assert [c.text for c in sections[0].chords] == ["G", "C"]


def test_export_with_preamble_then_import_keeps_structure():
    text = export_ultimate_guitar_text([_verse()], "Amazing Grace", "John Newton")
    sections = parse_ultimate_guitar_text(text)
    assert [(s.type, s.number, s.content) for s in sections] == [("verse", 1, "  Amazing grace")]
    assert [c.text for c in sections[0].chords] == ["G", "C"]


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


def test_adapter_parse_returns_song():
    song = UltimateGuitarTextAdapter().parse(load_fixture())
    assert isinstance(song, Song)
    assert len(song.sections) == 2


def test_adapter_render_writes_preamble():
    song = Song(title="Amazing Grace", artist="John Newton", sections=[_verse()])
    assert UltimateGuitarTextAdapter().render(song).startswith("Amazing Grace\nArtist: John Newton\n")


def test_adapter_extensions():
    assert UltimateGuitarTextAdapter.can_handle("song.ug")
    assert UltimateGuitarTextAdapter.can_handle("SONG.TAB")
    assert not UltimateGuitarTextAdapter.can_handle("song.txt")


def test_adapter_reads_preamble_as_metadata():
    adapter = UltimateGuitarTextAdapter()
    song = Song(title="Amazing Grace", artist="John Newton", sections=[_verse()])
    again = adapter.parse(adapter.render(song))
    assert (again.title, again.artist) == ("Amazing Grace", "John Newton")
    assert len(again.sections) == 1


def test_adapter_without_preamble_has_no_metadata():
    song = UltimateGuitarTextAdapter().parse(load_fixture())
    assert (song.title, song.artist) == ("", "")
