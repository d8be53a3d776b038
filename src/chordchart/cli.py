import logging
import re
import sys
from pathlib import Path

import click

from .detect import sniff_format
from .exceptions import ChordChartError
from .models import Song
from .pdf import PDFOptions, render_pdf
from .registry import FORMAT_NAMES, get_adapter, get_adapter_for_file
from .transpose import detect_key, transpose_song

_EXTENSIONS = {
    "ultimate-guitar": ".ug",
    "freeshow": ".txt",
    "openlyrics": ".xml",
    "show": ".show",
    "pdf": ".pdf",
}


def _slugify(text: str) -> str:
    """Convert a string to a lowercase hyphenated slug suitable for filenames."""
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)   # drop punctuation
    text = re.sub(r"[\s_]+", "-", text)     # spaces/underscores → hyphens
    text = re.sub(r"-{2,}", "-", text)      # collapse multiple hyphens
    return text.strip("-")


def _default_filename(song: Song, fmt: str) -> str:
    stem = "-".join(filter(None, [_slugify(song.artist), _slugify(song.title)])) or "song"
    return stem + _EXTENSIONS[fmt]


def _read_song(path: Path, fmt: str | None) -> Song:
    """Read *path* and parse it, sniffing the format unless *fmt* is given."""
    text = path.read_text(encoding="utf-8")
    fmt = fmt or sniff_format(text, path.name)
    logging.getLogger(__name__).debug("Reading %s as %s", path, fmt)
    song = get_adapter(fmt).parse(text, str(path))
    if not song.title:
        song.title = path.stem
    return song


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log parsing details to stderr.")
def main(verbose: bool) -> None:
    """Convert, transpose and inspect chord charts.

    \b
    Formats:
      - ultimate-guitar  chord rows above lyrics
      - freeshow         inline [Chord] markers
      - openlyrics       OpenLyrics / verse-tagged XML
      - show             FreeShow .show project
      - pdf              chord chart (output only)
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--to", "to_format", type=click.Choice([*FORMAT_NAMES, "pdf"]), default=None,
              help="Output format (default: from the output file extension).")
@click.option("--from", "from_format", type=click.Choice(FORMAT_NAMES), default=None,
              help="Input format (default: detected).")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <artist>-<title>.<ext>)")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
@click.option("-t", "--transpose", "transpose_value", default="", metavar="VALUE",
              help='Transpose by "+N"/"-N" semitones or to a key such as "G".')
@click.option("--title", default=None, help="Override the song title.")
@click.option("--artist", default=None, help="Override the artist.")
@click.option("--paper", type=click.Choice(["letter", "a4"]), default="letter", show_default=True,
              help="Paper size for PDF output.")
def convert(
    input_path: Path,
    to_format: str | None,
    from_format: str | None,
    output_path: str | None,
    stdout: bool,
    transpose_value: str,
    title: str | None,
    artist: str | None,
    paper: str,
) -> None:
    """Convert a chord chart from one format to another."""
    if to_format is None:
        if not output_path:
            _fail("Give --to FORMAT or an output path with a known extension")
        if output_path.lower().endswith(".pdf"):
            to_format = "pdf"
        else:
            try:
                to_format = get_adapter_for_file(output_path).name
            except ChordChartError as exc:
                _fail(str(exc))

    try:
        song = _read_song(input_path, from_format)
    except ChordChartError as exc:
        _fail(str(exc))

    if not song.sections:
        _fail(f"No sections found in {input_path}")

    if title:
        song.title = title
    if artist:
        song.artist = artist
    if transpose_value:
        transpose_song(song, transpose_value)

    if to_format == "pdf":
        if stdout:
            _fail("PDF output cannot be written to stdout")
        data = render_pdf(song, PDFOptions(paper_size=paper))
        dest = Path(output_path) if output_path else Path(_default_filename(song, to_format))
        dest.write_bytes(data)
        click.echo(f"Written to {dest}")
        return

    rendered = get_adapter(to_format).render(song)
    if stdout:
        click.echo(rendered, nl=False)
        return

    dest = Path(output_path) if output_path else Path(_default_filename(song, to_format))
    dest.write_text(rendered, encoding="utf-8")
    click.echo(f"Written to {dest}")


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def detect(input_path: Path) -> None:
    """Print the detected format of a chart file."""
    text = input_path.read_text(encoding="utf-8")
    click.echo(sniff_format(text, input_path.name))


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--from", "from_format", type=click.Choice(FORMAT_NAMES), default=None,
              help="Input format (default: detected).")
def key(input_path: Path, from_format: str | None) -> None:
    """Print the detected key of a chart file."""
    try:
        song = _read_song(input_path, from_format)
    except ChordChartError as exc:
        _fail(str(exc))
    click.echo(detect_key(song.chord_texts()))
