"""
PDF chord chart export.

Draws a two-column chart: title block, then every section with its chord
rows above the lyrics.  Chord rows are rebuilt from the same
``{position, line}`` model the text exporters use, padding with spaces up to
each chord's column.  Helvetica is proportional, so the chords only line up
approximately with the syllables below them; that is a known limitation of
the layout, not something to correct by measuring glyphs.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .formats.utils import pad_chord_row
from .models import Chord, Song

logger = logging.getLogger(__name__)

PAGE_SIZES = {"letter": letter, "a4": A4}


@dataclass
class PDFOptions:
    """Options for PDF export."""

    paper_size: str = "letter"  # "letter", "a4"
    margin: float = 50  # points
    gutter: float = 32
    line_height: float = 20
    bottom_limit: float = 80  # start a new column below this y

    font: str = "Helvetica"
    bold_font: str = "Helvetica-Bold"
    title_size: int = 20
    artist_size: int = 14
    tags_size: int = 12
    heading_size: int = 14
    chord_size: int = 11
    lyric_size: int = 12

    title_color: Tuple[float, float, float] = (0.1, 0.1, 0.3)
    artist_color: Tuple[float, float, float] = (0.2, 0.2, 0.2)
    tags_color: Tuple[float, float, float] = (0.3, 0.3, 0.3)
    heading_color: Tuple[float, float, float] = (0.1, 0.2, 0.5)
    chord_color: Tuple[float, float, float] = (0.1, 0.4, 0.1)
    lyric_color: Tuple[float, float, float] = (0, 0, 0)


def chord_row(chords: list[Chord]) -> str:
    """Text of the chord row drawn above a lyric line."""
    return pad_chord_row(chords, start=0)


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Greedy word wrap by rendered width.  A blank line wraps to nothing."""
    lines: list[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if current and stringWidth(candidate, font, size) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


class _ChartWriter:
    """Tracks the column/page cursor while drawing."""

    def __init__(self, pdf: canvas.Canvas, pagesize: Tuple[float, float], options: PDFOptions):
        self.pdf = pdf
        self.options = options
        self.width, self.height = pagesize
        self.col_width = (self.width - 2 * options.margin - options.gutter) // 2
        self.col_x = [options.margin, options.margin + self.col_width + options.gutter]
        self.col = 0
        self.y = self.height - options.margin

    def draw(self, text: str, font: str, size: float, color) -> None:
        self.pdf.setFont(font, size)
        self.pdf.setFillColorRGB(*color)
        self.pdf.drawString(self.col_x[self.col], self.y, text)

    def ensure_room(self, needed: float) -> None:
        if self.y - needed >= self.options.bottom_limit:
            return
        if self.col == 0:
            self.col = 1
        else:
            self.pdf.showPage()
            self.col = 0
        self.y = self.height - self.options.margin


def render_pdf(song: Song, options: Optional[PDFOptions] = None) -> bytes:
    """Render *song* as a PDF chord chart and return the file bytes."""
    options = options or PDFOptions()
    pagesize = PAGE_SIZES.get(options.paper_size.lower(), letter)
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=pagesize)
    pdf.setTitle(song.title or "Untitled Song")
    if song.artist:
        pdf.setAuthor(song.artist)

    out = _ChartWriter(pdf, pagesize, options)
    lh = options.line_height

    out.draw(song.title or "Untitled Song", options.bold_font, options.title_size, options.title_color)
    out.y -= lh + 5
    if song.artist:
        out.draw(f"Artist: {song.artist}", options.font, options.artist_size, options.artist_color)
        out.y -= lh
    if song.tags:
        out.draw(f"Tags: {', '.join(song.tags)}", options.font, options.tags_size, options.tags_color)
        out.y -= lh
    out.y -= 10

    for section in song.sections:
        lines = section.lines
        # conservative estimate: every line may carry a chord row
        out.ensure_room(lh + len(lines) * lh * 2 + 8)

        heading = section.type.upper() + (f" {section.number}" if section.number else "") + ":"
        out.draw(heading, options.bold_font, options.heading_size, options.heading_color)
        out.y -= lh

        for index, lyric in enumerate(lines):
            chords = section.chords_on_line(index)
            wrapped = wrap_text(lyric, options.font, options.lyric_size, out.col_width)
            if chords and wrapped:
                out.draw(chord_row(chords), options.font, options.chord_size, options.chord_color)
                out.y -= lh - 6
            for part in wrapped:
                out.draw(part, options.font, options.lyric_size, options.lyric_color)
                out.y -= lh
        out.y -= 8

    pdf.save()
    logger.debug("Rendered %d section(s) of %r to PDF", len(song.sections), song.title)
    return buffer.getvalue()
