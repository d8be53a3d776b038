from unittest.mock import MagicMock

from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfbase.pdfmetrics import stringWidth

from chordchart.models import Chord, Section, Song
from chordchart.pdf import PDFOptions, _ChartWriter, chord_row, render_pdf, wrap_text


def _song(sections: int = 2) -> Song:
    return Song(
        title="Amazing Grace",
        artist="John Newton",
        tags=["Hymn", "Grace"],
        sections=[
            Section(
                type="verse" if i % 2 == 0 else "chorus",
                number=i // 2 + 1,
                content="Amazing grace how sweet the sound\n\nThat saved a wretch like me",
                chords=[Chord("G", 0, 0), Chord("C", 18, 0), Chord("D", 13, 2)],
            )
            for i in range(sections)
        ],
    )


# ---------------------------------------------------------------------------
# chord_row
# ---------------------------------------------------------------------------


def test_chord_row_pads_to_columns():
    assert chord_row([Chord("G", 0, 0), Chord("C", 18, 0)]) == "G" + " " * 17 + "C"


def test_chord_row_sorts_and_never_overlaps():
    assert chord_row([Chord("D", 3, 0), Chord("Cmaj7", 0, 0)]) == "Cmaj7D"


def test_chord_row_starts_at_column_zero():
    assert chord_row([Chord("G", 2, 0)]) == "  G"


# ---------------------------------------------------------------------------
# wrap_text
# ---------------------------------------------------------------------------


def test_wrap_blank_line():
    assert wrap_text("", "Helvetica", 12, 200) == []


def test_wrap_short_line_unchanged():
    assert wrap_text("Amazing grace", "Helvetica", 12, 200) == ["Amazing grace"]


def test_wrap_long_line_fits_width():
    text = "Through many dangers toils and snares I have already come"
    parts = wrap_text(text, "Helvetica", 12, 100)
    assert len(parts) > 1
    assert " ".join(parts) == text
    for part in parts:
        assert " " not in part or stringWidth(part, "Helvetica", 12) <= 100


def test_wrap_keeps_overlong_word():
    assert wrap_text("Hallelujahhhhhhhhhhh", "Helvetica", 12, 10) == ["Hallelujahhhhhhhhhhh"]


# ---------------------------------------------------------------------------
# _ChartWriter
# ---------------------------------------------------------------------------


def test_writer_moves_to_second_column_then_new_page():
    pdf = MagicMock()
    options = PDFOptions()
    writer = _ChartWriter(pdf, letter, options)
    top = letter[1] - options.margin

    writer.y = options.bottom_limit + 10
    writer.ensure_room(50)
    assert (writer.col, writer.y) == (1, top)
    pdf.showPage.assert_not_called()

    writer.y = options.bottom_limit + 10
    writer.ensure_room(50)
    assert (writer.col, writer.y) == (0, top)
    pdf.showPage.assert_called_once()


def test_writer_stays_when_there_is_room():
    writer = _ChartWriter(MagicMock(), letter, PDFOptions())
    y = writer.y
    writer.ensure_room(100)
    assert (writer.col, writer.y) == (0, y)


def test_writer_draws_in_current_column():
    pdf = MagicMock()
    options = PDFOptions()
    writer = _ChartWriter(pdf, A4, options)
    writer.col = 1
    writer.draw("G", "Helvetica", 11, (0, 0, 0))
    x, _, text = pdf.drawString.call_args.args
    assert x == options.margin + writer.col_width + options.gutter
    assert text == "G"


# ---------------------------------------------------------------------------
# render_pdf
# ---------------------------------------------------------------------------


def test_render_returns_pdf_bytes():
    data = render_pdf(_song())
    assert data.startswith(b"%PDF")
    assert data.rstrip().endswith(b"%%EOF")


def test_render_a4():
    assert render_pdf(_song(), PDFOptions(paper_size="a4")).startswith(b"%PDF")


def test_render_untitled_empty_song():
    assert render_pdf(Song()).startswith(b"%PDF")


def test_render_long_song_spans_pages():
    short = render_pdf(_song(2))
    long = render_pdf(_song(40))
    assert long.startswith(b"%PDF")
    assert len(long) > len(short)
